# -*- coding: utf-8 -*-
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from ..codec import encode_public_inputs
from ..config import BN254_MODULUS, PUBLIC_INPUT_COUNT
from ..exceptions import MalformedInput
from ..types import ClaimAssertion

VECTOR_FILE = Path(__file__).with_name("codec_vectors.json")


def load_vectors(path: Path = VECTOR_FILE) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def claim_from_vector(vector: Dict[str, Any]) -> ClaimAssertion:
    return ClaimAssertion.from_dict(vector["claim"])


def expected_inputs(vector: Dict[str, Any]) -> tuple:
    return tuple(int(word, 16) for word in vector["expected_public_inputs_hex"])


def validate_vectors(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if data.get("version") != 1:
        errors.append("unsupported vector file version")
    if int(data.get("field_modulus_hex", "0"), 16) != BN254_MODULUS:
        errors.append("field_modulus_hex does not match BN254_MODULUS")

    vectors = data.get("vectors")
    if not isinstance(vectors, list) or not vectors:
        errors.append("vectors must be a non-empty list")
        return errors

    for index, vector in enumerate(vectors):
        name = vector.get("name", f"#{index}")
        words = vector.get("expected_public_inputs_hex", [])
        if len(words) != PUBLIC_INPUT_COUNT:
            errors.append(f"{name}: expected {PUBLIC_INPUT_COUNT} words, got {len(words)}")
            continue
        if any(len(word) != 64 for word in words):
            errors.append(f"{name}: every word must be 32 bytes of hex")
            continue
        try:
            actual = encode_public_inputs(claim_from_vector(vector))
        except MalformedInput as exc:
            errors.append(f"{name}: claim rejected: {exc}")
            continue
        if actual != expected_inputs(vector):
            errors.append(f"{name}: encoded inputs differ from expected")
    return errors
