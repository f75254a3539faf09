import os

import uvicorn

from app.core.config import settings


def run_migrations():
    """Run Alembic migrations."""
    try:
        from alembic.config import Config
        from alembic import command

        alembic_cfg = Config("alembic.ini")
        print("[STARTUP] Running database migrations...")
        command.upgrade(alembic_cfg, "head")
        print("[STARTUP] Migrations complete!")
        return True
    except Exception as e:
        print(f"[WARN] Migration failed: {e}")
        return False


if __name__ == "__main__":
    # Tables are otherwise created by the app lifespan (init_db)
    if os.getenv("RUN_MIGRATIONS") == "true" and not run_migrations():
        print("[WARN] Falling back to direct table creation on startup...")

    # Disable reload in production
    reload = os.getenv("ENV") == "development"

    print(f"[STARTUP] Server binding to host={settings.HOST} port={settings.PORT}")
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=reload,
        log_level=settings.LOG_LEVEL.lower(),
        workers=1,
    )
