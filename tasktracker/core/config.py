from os import getenv

class Settings:
    JWT_SECRET = getenv("JWT_SECRET", "dev-secret-change-in-prod")
    JWT_EXPIRE_MIN = int(getenv("JWT_EXPIRE_MIN", "60"))  # expire au bout d'1 heure
    DATABASE_URL = getenv("DATABASE_URL", "sqlite:///./tasktracker.db")
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")

    # Admin créé au démarrage si les deux variables sont présentes
    ADMIN_EMAIL = getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD = getenv("ADMIN_PASSWORD")
    ADMIN_NAME = getenv("ADMIN_NAME", "Admin")

settings = Settings()
