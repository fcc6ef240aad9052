"""
Database configuration for ManzelHelp.

Supports:
- DATABASE_URL (postgres://, postgresql:// or sqlite:///path)
- Individual env vars: DB_HOST, DB_NAME, DB_USER, DB_PASSWORD, DB_PORT
- SQLite fallback for development and tests
"""
import os
from pathlib import Path
from urllib.parse import urlparse, parse_qs, unquote

POSTGRES_SCHEMES = ('postgres', 'postgresql')


def get_database_config(base_dir: Path) -> dict:
    """
    Returns the `default` database configuration based on environment.

    On Lambda persistent connections are disabled; pooling is left to
    RDS Proxy / pgbouncer in front of the database.
    """
    database_url = os.getenv('DATABASE_URL', '')

    if database_url:
        config = _parse_database_url(database_url, base_dir)
    elif os.getenv('DB_HOST'):
        config = _get_env_config()
    else:
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': base_dir / 'db.sqlite3',
        }

    if config['ENGINE'] == 'django.db.backends.postgresql':
        _apply_postgres_options(config)
    return config


def _parse_database_url(url: str, base_dir: Path) -> dict:
    """Parse a DATABASE_URL into a Django database dict."""
    parsed = urlparse(url)

    if parsed.scheme == 'sqlite':
        name = unquote(parsed.path.lstrip('/')) or 'db.sqlite3'
        path = Path(name)
        return {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': path if path.is_absolute() else base_dir / path,
        }

    if parsed.scheme not in POSTGRES_SCHEMES:
        raise ValueError(f"Unsupported DATABASE_URL scheme: {parsed.scheme}")

    if not parsed.hostname or not parsed.path.strip('/'):
        raise ValueError("Invalid DATABASE_URL: host and database name are required")

    config = {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': unquote(parsed.path.lstrip('/')),
        'USER': unquote(parsed.username or ''),
        'PASSWORD': unquote(parsed.password or ''),
        'HOST': parsed.hostname,
        'PORT': str(parsed.port or 5432),
        'OPTIONS': {},
    }

    query = parse_qs(parsed.query)
    if 'sslmode' in query:
        config['OPTIONS']['sslmode'] = query['sslmode'][0]

    return config


def _get_env_config() -> dict:
    """Build config from individual environment variables."""
    config = {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.getenv('DB_NAME', 'manzelhelp'),
        'USER': os.getenv('DB_USER', 'postgres'),
        'HOST': os.getenv('DB_HOST', 'localhost'),
        'PORT': os.getenv('DB_PORT', '5432'),
        'OPTIONS': {},
    }

    password = os.getenv('DB_PASSWORD')
    if password:
        config['PASSWORD'] = password

    sslmode = os.getenv('DB_SSLMODE')
    if sslmode:
        config['OPTIONS']['sslmode'] = sslmode

    return config


def _apply_postgres_options(config: dict) -> None:
    """Connection lifetime and timeouts shared by both Postgres paths."""
    if os.getenv('AWS_LAMBDA_FUNCTION_NAME'):
        config['CONN_MAX_AGE'] = 0
        config['OPTIONS']['connect_timeout'] = 5
        config['OPTIONS']['options'] = '-c statement_timeout=30000'
    else:
        config['CONN_MAX_AGE'] = int(os.getenv('DB_CONN_MAX_AGE', '60'))
