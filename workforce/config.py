from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Config:
    output_dir: Path = Path(os.getenv("OUTPUT_DIR", "outputs"))
    store_file: str = os.getenv("STORE_FILE", "storage.json")
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "50"))

    evaluator_provider: str = os.getenv("EVALUATOR_PROVIDER", "openai")
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    openai_model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    hf_token: str = os.getenv("HF_TOKEN", "")
    vlm_model: str = os.getenv("VLM_MODEL", "Qwen/Qwen2.5-VL-3B-Instruct")
    vlm_device: str = os.getenv("VLM_DEVICE", "cuda")
    vlm_4bit: bool = _flag("VLM_4BIT", "false")
    vlm_max_new_tokens: int = int(os.getenv("VLM_MAX_NEW_TOKENS", "512"))
    vlm_temperature: float = float(os.getenv("VLM_TEMPERATURE", "0.0"))

    frame_max_side: int = int(os.getenv("FRAME_MAX_SIDE", "1024"))
    frame_jpeg_quality: int = int(os.getenv("FRAME_JPEG_QUALITY", "80"))

    reconcile_payroll: bool = _flag("RECONCILE_PAYROLL", "true")

    report_llm_provider: str = os.getenv("REPORT_LLM_PROVIDER", "none")
    report_model: str = os.getenv("REPORT_MODEL", "gpt-4o-mini")

    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    default_employee_id: str = os.getenv("DEFAULT_EMPLOYEE_ID", "EM001")
    default_check_in: str = os.getenv("DEFAULT_CHECK_IN", "09:00")
    default_current_time: str = os.getenv("DEFAULT_CURRENT_TIME", "17:30")

    @property
    def store_path(self) -> Path:
        return self.output_dir / self.store_file


CONFIG = Config()
