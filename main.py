from dotenv import load_dotenv

# Cargar variables de entorno antes de construir Settings y la app
load_dotenv()

from laburoya.main import app  # noqa: E402


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8090, workers=1)
