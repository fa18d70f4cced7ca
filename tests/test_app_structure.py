from app.core.config import settings
from app.core.container import global_container


def test_config_loading():
    assert settings.PROJECT_NAME == "chain-connector"
    assert settings.ALGO_PREFIX == "/v3/algorand"
    assert global_container.multitoken_service is not None
    assert global_container.algo_service is not None
    assert not global_container.kms_store.persistence_enabled()
    assert global_container.kms_service is not None
