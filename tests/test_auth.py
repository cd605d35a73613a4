import bcrypt
import pytest
from sqlalchemy import select

from app.errors import DuplicateEmail, InvalidCredentials, MissingField
from app.models import UserLogin
from app.routers.auth import authenticate, register_user
from app.utils.passwords import hash_password, verify_password


def test_register_then_login(client):
    creds = {'email': 'ops@example.com', 'password': 's3cret'}

    registered = client.post("/api/register", data=creds).json()
    logged_in = client.post("/api/login", data=creds).json()

    assert registered == {'status': 'success', 'message': 'Registration successful'}
    assert logged_in == {'status': 'success', 'message': 'Login successful'}


def test_register_accepts_json_body(client):
    body = client.post("/api/register", json={'email': 'json@example.com', 'password': 'pw'}).json()

    assert body['status'] == 'success'


def test_duplicate_email_rejected(client):
    creds = {'email': 'dup@example.com', 'password': 'pw1'}
    client.post("/api/register", data=creds)

    body = client.post("/register.php", data={'email': 'dup@example.com', 'password': 'other'}).json()

    assert body == {'status': 'error', 'message': 'Email already registered'}


@pytest.mark.parametrize(
    "fields",
    [
        {},
        {'email': 'a@example.com'},
        {'password': 'pw'},
        {'email': '   ', 'password': 'pw'},
        {'email': 'a@example.com', 'password': '  '},
    ],
)
@pytest.mark.parametrize("path", ["/api/register", "/api/login"])
def test_missing_fields(client, path, fields):
    body = client.post(path, data=fields).json()

    assert body == {'status': 'error', 'message': 'Email and password required'}


def test_wrong_password_and_unknown_email_share_message(client):
    client.post("/api/register", data={'email': 'user@example.com', 'password': 'right'})

    wrong = client.post("/api/login", data={'email': 'user@example.com', 'password': 'wrong'}).json()
    unknown = client.post("/login.php", data={'email': 'nobody@example.com', 'password': 'right'}).json()

    assert wrong == unknown == {'status': 'error', 'message': 'Invalid email or password'}


def test_invalid_method(client):
    assert client.get("/api/login").json() == {'status': 'error', 'message': 'Invalid request'}
    assert client.get("/register.php").json() == {'status': 'error', 'message': 'Invalid request'}


def test_password_is_stored_hashed_and_trimmed(db_session):
    register_user(db_session, ' trim@example.com ', ' pw ')

    stored = db_session.execute(
        select(UserLogin.tbl_password).where(UserLogin.tbl_email == 'trim@example.com')
    ).scalar_one()

    assert stored != 'pw'
    assert verify_password('pw', stored)
    authenticate(db_session, 'trim@example.com', 'pw ')


def test_repository_errors(db_session):
    register_user(db_session, 'x@example.com', 'pw')

    with pytest.raises(DuplicateEmail):
        register_user(db_session, 'x@example.com', 'pw')
    with pytest.raises(InvalidCredentials):
        authenticate(db_session, 'x@example.com', 'nope')
    with pytest.raises(MissingField):
        authenticate(db_session, '', 'pw')


def test_verify_accepts_php_style_hash():
    php_hash = bcrypt.hashpw(b'legacy', bcrypt.gensalt(rounds=4)).decode().replace('$2b$', '$2y$', 1)

    assert verify_password('legacy', php_hash)
    assert not verify_password('other', php_hash)


def test_verify_rejects_malformed_hash():
    assert not verify_password('pw', 'not-a-bcrypt-hash')
    assert not verify_password('pw', None)


def test_long_passwords_are_truncated_consistently():
    hashed = hash_password('a' * 100)

    assert verify_password('a' * 72 + 'different tail', hashed)


def test_json_integer_over_digit_limit_falls_back_to_missing_fields(client):
    response = client.post(
        "/api/login",
        content='{"email": 1' + '0' * 5000 + ', "password": "pw"}',
        headers={'Content-Type': 'application/json'},
    )

    assert response.status_code == 200
    assert response.json() == {'status': 'error', 'message': 'Email and password required'}


def test_malformed_multipart_body(client):
    response = client.post(
        "/api/register",
        content=b'not really multipart',
        headers={'Content-Type': 'multipart/form-data'},
    )

    assert response.status_code == 200
    assert response.json() == {'status': 'error', 'message': 'Email and password required'}
