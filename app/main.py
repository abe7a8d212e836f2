import uvicorn

from app.core.app_factory import create_app

app = create_app()


def run() -> None:
    """Serve the app with uvicorn (single worker keeps one limiter store)."""
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, workers=1)


if __name__ == "__main__":
    run()
