from library_api.app.services.validators import (
    validate_book,
    validate_book_update,
    validate_loan,
    validate_member,
    validate_member_update,
)


def test_valid_book_has_no_errors():
    assert validate_book("Cien años de soledad", "Gabriel García Márquez") == []


def test_book_required_fields():
    assert validate_book(None, "  ") == ["El título es requerido", "El autor es requerido"]


def test_book_length_bounds():
    errors = validate_book("A", "x" * 101)
    assert "El título debe tener al menos 2 caracteres" in errors
    assert "El autor no puede exceder 100 caracteres" in errors
    assert validate_book("t" * 201, "Autor") == ["El título no puede exceder 200 caracteres"]


def test_book_character_class():
    errors = validate_book("Libro <script>", "Autor #1")
    assert errors == [
        "El título contiene caracteres no válidos",
        "El autor contiene caracteres no válidos",
    ]
    assert validate_book('El "Quijote" (tomo I); ed. 2', "Miguel de Cervantes") == []


def test_book_update_checks_only_present_fields():
    assert validate_book_update(None, None) == []
    assert validate_book_update(None, "Borges") == []
    assert validate_book_update("", None) == ["El título es requerido"]


def test_member_rules():
    assert validate_member("Ana Pérez", "Ana@Mail.com") == []
    assert validate_member("R2D2", "robot@mail.com") == ["El nombre solo puede contener letras y espacios"]
    assert validate_member("Ana", "no-at-sign") == ["El formato del email no es válido"]
    assert validate_member("Ana", "") == ["El email es requerido"]
    long_email = "a" * 95 + "@mail.com"
    assert validate_member("Ana", long_email) == ["El email no puede exceder 100 caracteres"]


def test_member_update_checks_only_present_fields():
    assert validate_member_update(None, None) == []
    assert validate_member_update(None, "bad") == ["El formato del email no es válido"]


def test_loan_requires_both_ids():
    assert validate_loan(None, "m1") == ["ID del libro es requerido"]
    assert validate_loan("", "") == ["ID del libro es requerido", "ID del usuario es requerido"]
