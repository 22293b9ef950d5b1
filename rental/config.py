import os

class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False

    # Hosted store / object storage
    SUPABASE_URL = os.getenv('SUPABASE_URL', '')
    SUPABASE_KEY = os.getenv('SUPABASE_KEY', '')
    ATTACHMENTS_BUCKET = os.getenv('ATTACHMENTS_BUCKET', 'quote_attachments')

    # Collections notifications
    COLLECTIONS_NUMBER = os.getenv('COLLECTIONS_NUMBER', '')
    MESSAGING_WEBHOOK_URL = os.getenv('MESSAGING_WEBHOOK_URL', '')
    MESSAGING_TOKEN = os.getenv('MESSAGING_TOKEN', '')

    HTTP_TIMEOUT = int(os.getenv('HTTP_TIMEOUT', '10'))

class DevConfig(BaseConfig):
    DEBUG = True
    ENV = 'development'

class ProdConfig(BaseConfig):
    DEBUG = False
    ENV = 'production'
    SESSION_COOKIE_SECURE = True

class TestConfig(BaseConfig):
    TESTING = True
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SUPABASE_URL = ''
    MESSAGING_WEBHOOK_URL = ''
    COLLECTIONS_NUMBER = '56900000000'
