import dotenv

dotenv.load_dotenv()

from indiastreamz.main import run_with_uvicorn  # noqa: E402

if __name__ == "__main__":
    run_with_uvicorn()
