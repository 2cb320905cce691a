"""
Validation rules for books, members and loans.

Each function returns a list of human‑readable violations; an empty
list means the input is valid.  Services join the list into a single
``ValidationError`` at their boundary.  The partial variants validate
only the fields present in an update.
"""

import re
from typing import List, Optional


# Letters (Spanish accents included), digits and common punctuation.
TEXT_RE = re.compile(r"[a-zA-Z0-9\sáéíóúÁÉÍÓÚñÑüÜ.,;:()\-'\"]+")
NAME_RE = re.compile(r"[a-zA-ZáéíóúÁÉÍÓÚñÑüÜ\s]+")
EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

TITLE_LENGTH = (2, 200)
AUTHOR_LENGTH = (2, 100)
NAME_LENGTH = (2, 100)
EMAIL_MAX_LENGTH = 100


def _check_length(
    value: Optional[str],
    label: str,
    bounds: tuple,
    errors: List[str],
) -> None:
    min_len, max_len = bounds
    stripped = (value or "").strip()
    if not stripped:
        errors.append(f"{label} es requerido")
    elif len(stripped) < min_len:
        errors.append(f"{label} debe tener al menos {min_len} caracteres")
    elif len(stripped) > max_len:
        errors.append(f"{label} no puede exceder {max_len} caracteres")


def is_valid_email(email: str) -> bool:
    return EMAIL_RE.fullmatch(email) is not None


def validate_title(title: Optional[str]) -> List[str]:
    errors: List[str] = []
    _check_length(title, "El título", TITLE_LENGTH, errors)
    if title and not TEXT_RE.fullmatch(title):
        errors.append("El título contiene caracteres no válidos")
    return errors


def validate_author(author: Optional[str]) -> List[str]:
    errors: List[str] = []
    _check_length(author, "El autor", AUTHOR_LENGTH, errors)
    if author and not TEXT_RE.fullmatch(author):
        errors.append("El autor contiene caracteres no válidos")
    return errors


def validate_book(title: Optional[str], author: Optional[str]) -> List[str]:
    return validate_title(title) + validate_author(author)


def validate_book_update(title: Optional[str], author: Optional[str]) -> List[str]:
    errors: List[str] = []
    if title is not None:
        errors += validate_title(title)
    if author is not None:
        errors += validate_author(author)
    return errors


def validate_name(name: Optional[str]) -> List[str]:
    errors: List[str] = []
    _check_length(name, "El nombre", NAME_LENGTH, errors)
    if name and not NAME_RE.fullmatch(name):
        errors.append("El nombre solo puede contener letras y espacios")
    return errors


def validate_email(email: Optional[str]) -> List[str]:
    if not email or not email.strip():
        return ["El email es requerido"]
    if not is_valid_email(email.strip()):
        return ["El formato del email no es válido"]
    if len(email.strip()) > EMAIL_MAX_LENGTH:
        return [f"El email no puede exceder {EMAIL_MAX_LENGTH} caracteres"]
    return []


def validate_member(name: Optional[str], email: Optional[str]) -> List[str]:
    return validate_name(name) + validate_email(email)


def validate_member_update(name: Optional[str], email: Optional[str]) -> List[str]:
    errors: List[str] = []
    if name is not None:
        errors += validate_name(name)
    if email is not None:
        errors += validate_email(email)
    return errors


def validate_loan(book_id: Optional[str], member_id: Optional[str]) -> List[str]:
    errors: List[str] = []
    if not book_id:
        errors.append("ID del libro es requerido")
    if not member_id:
        errors.append("ID del usuario es requerido")
    return errors
