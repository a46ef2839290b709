"""CLI entry point for Mente Segura."""
import os
import uvicorn


def main():
    """Launch the Mente Segura server."""
    from mentesegura.config import load_config
    cfg = load_config()

    db_dir = os.path.dirname(cfg.database.sqlite_path)
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    uvicorn.run(
        "mentesegura.app:app",
        host=cfg.app.host,
        port=cfg.app.port,
        reload=cfg.app.env == "development",
        log_level=cfg.app.log_level.lower(),
        timeout_keep_alive=30,
    )


if __name__ == "__main__":
    main()
