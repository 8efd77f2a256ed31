"""
text_embedder/core/config.py

Centralised configuration loaded from environment variables.
Use a .env file locally; deployment tooling injects these at runtime.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Application ────────────────────────────────────────────────────────────
    debug: bool = False
    log_to_stdout: bool = False     # attach the console handler at import

    # ── Inference runtime (ONNX Runtime) ───────────────────────────────────────
    ort_intra_threads: int = 1
    ort_inter_threads: Optional[int] = None
    ort_parallel_execution: Optional[bool] = None
    ort_optimization_level: int = 3     # 0 = disabled … 3 = all optimizations
    ort_providers: List[str] = ["CPUExecutionProvider"]

    # ── Tokenizer ──────────────────────────────────────────────────────────────
    add_special_tokens: bool = True

    # ── Retrieval ──────────────────────────────────────────────────────────────
    retrieval_top_k: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Single shared instance — import this everywhere.
settings = Settings()
