import secrets

CLIENT_ID_PREFIX = "sa_"


def _random_string(length: int) -> str:
    return secrets.token_urlsafe(length)[:length]


def generate_client_id() -> str:
    return CLIENT_ID_PREFIX + _random_string(20)


def generate_client_secret() -> str:
    return _random_string(40)
