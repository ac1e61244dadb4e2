import os


def _split(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Config:

    OPERATOR_NAMESPACE: str = os.getenv("OPERATOR_NAMESPACE", "operator")
    TARGET_NAMESPACES: list[str] = _split(os.getenv("TARGET_NAMESPACES", "default"))
    ACCESS_MATRIX_FILE: str = os.getenv("ACCESS_MATRIX_FILE", "")
    RULES_REVIEW_VERSION: str = os.getenv("RULES_REVIEW_VERSION", "1.8")
    ISOLATE_NAMESPACE_FAILURES: bool = os.getenv("ISOLATE_NAMESPACE_FAILURES", "false").lower() == "true"
    KUBE_CONTEXT: str = os.getenv("KUBE_CONTEXT", "")
    DOMAIN_VERSION: str = os.getenv("DOMAIN_VERSION", "v2")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
