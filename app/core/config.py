import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() == "true"


class Settings:
    PROJECT_NAME: str = "chain-connector"
    VERSION: str = "0.1.0"

    # Network selection
    TESTNET: bool = _env_bool("TESTNET", "false")

    # HTTP server
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    ALGO_PREFIX: str = os.getenv("ALGO_PREFIX", "/v3/algorand")
    MULTITOKEN_PREFIX: str = os.getenv("MULTITOKEN_PREFIX", "/v3/multitoken")
    KMS_PREFIX: str = os.getenv("KMS_PREFIX", "/v3/kms")

    # Python module exposing the multi-token `prepare_*` functions
    MULTITOKEN_SDK_MODULE: str = os.getenv("MULTITOKEN_SDK_MODULE", "").strip()

    # Algorand node credentials (node URLs are resolved by chains.nodes)
    ALGO_ALGOD_TOKEN: str = os.getenv("ALGO_ALGOD_TOKEN", "")
    ALGO_INDEXER_TOKEN: str = os.getenv("ALGO_INDEXER_TOKEN", "")
    NODE_HTTP_TIMEOUT_SEC: float = float(os.getenv("NODE_HTTP_TIMEOUT_SEC", "30"))

    # Pending KMS transactions; empty keeps them in memory only
    KMS_DB_PATH: str = os.getenv("KMS_DB_PATH", "data/kms.db").strip()


settings = Settings()
