from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from PIL import Image

from .config import CONFIG


@dataclass
class VLMRuntime:
    model: Any
    processor: Any


class LocalModelUnavailable(RuntimeError):
    """The local verification model cannot be loaded on this terminal."""


_RUNTIMES: dict[tuple[str, bool], VLMRuntime] = {}


def _model_kwargs(torch: Any, bnb_config: Any, use_4bit: bool) -> dict[str, Any]:
    if use_4bit:
        return {"quantization_config": bnb_config(load_in_4bit=True), "device_map": "auto"}
    return {"torch_dtype": torch.float16}


def load_vlm(model_name: str | None = None, use_4bit: bool | None = None) -> VLMRuntime:
    """Load (once per process) a local vision-language model for offline verification.

    Failures are not cached: a terminal that regains network or a GPU can retry
    on the next submission.
    """
    model_name = model_name or CONFIG.vlm_model
    use_4bit = CONFIG.vlm_4bit if use_4bit is None else use_4bit
    key = (model_name, use_4bit)
    if key in _RUNTIMES:
        return _RUNTIMES[key]

    try:
        import torch
        from transformers import AutoModelForImageTextToText, AutoProcessor, BitsAndBytesConfig
    except ImportError as exc:
        raise LocalModelUnavailable(
            f"local verification needs the 'local' extra (transformers/torch): {exc}"
        ) from exc

    if not use_4bit and CONFIG.vlm_device.startswith("cuda") and not torch.cuda.is_available():
        raise LocalModelUnavailable(f"VLM_DEVICE={CONFIG.vlm_device} but CUDA is not available")

    token = CONFIG.hf_token or None
    try:
        processor = AutoProcessor.from_pretrained(model_name, token=token, trust_remote_code=True)
        model = AutoModelForImageTextToText.from_pretrained(
            model_name,
            token=token,
            trust_remote_code=True,
            **_model_kwargs(torch, BitsAndBytesConfig, use_4bit),
        )
    except (OSError, ValueError) as exc:
        raise LocalModelUnavailable(f"cannot load verification model {model_name!r}: {exc}") from exc

    if not use_4bit:
        model = model.to(CONFIG.vlm_device)
    _RUNTIMES[key] = VLMRuntime(model=model, processor=processor)
    return _RUNTIMES[key]


def vlm_generate(image: Image.Image | None, prompt: str, *, max_new_tokens: int | None = None) -> str:
    """Run one chat turn with an optional frame and return the decoded reply."""
    runtime = load_vlm()
    processor = runtime.processor
    model = runtime.model

    images = [image] if image is not None else []
    chat = [
        {
            "role": "user",
            "content": [{"type": "image"} for _ in images] + [{"type": "text", "text": prompt}],
        }
    ]
    text_prompt = processor.apply_chat_template(chat, tokenize=False, add_generation_prompt=True)
    processor_kwargs: dict[str, Any] = {"text": [text_prompt], "return_tensors": "pt", "padding": True}
    if images:
        processor_kwargs["images"] = images
    inputs = processor(**processor_kwargs)
    inputs = {k: v.to(model.device) for k, v in inputs.items()}

    temperature = CONFIG.vlm_temperature
    output_ids = model.generate(
        **inputs,
        max_new_tokens=max_new_tokens or CONFIG.vlm_max_new_tokens,
        temperature=temperature if temperature > 0 else None,
        do_sample=temperature > 0,
    )
    generated = output_ids[:, inputs["input_ids"].shape[-1] :]
    return processor.batch_decode(generated, skip_special_tokens=True)[0].strip()
