# synapse_core/utils/json_fields.py
import json
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


def decode_json_object(raw: Any) -> Optional[Dict[str, Any]]:
    """
    문자열로 인코딩된 JSON 하위 문서를 딕셔너리로 디코딩합니다.

    API는 details/parameters 필드를 JSON 문자열로 내려주지만, 이미 디코딩된
    객체가 오거나 아예 비어 있는 경우도 있습니다. 어떤 경우에도 예외를 던지지 않습니다.

    Returns:
        디코딩된 딕셔너리. 디코딩할 수 없거나 결과가 객체(dict)가 아니면 None.
    """
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        decoded = json.loads(raw)
    except (ValueError, TypeError):
        return None
    return decoded if isinstance(decoded, dict) else None


def decode_json_value(raw: Any) -> Any:
    """details/parameters를 객체 또는 리스트로 디코딩합니다. 실패하면 None."""
    if isinstance(raw, (dict, list)):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def parse_or_default(raw: Any, schema: Type[T]) -> Optional[T]:
    """
    인코딩된 하위 문서를 주어진 pydantic 스키마로 해석합니다.

    Args:
        raw: JSON 문자열 또는 이미 디코딩된 딕셔너리.
        schema: 모든 필드가 선택적인 하위 스키마 클래스.

    Returns:
        스키마 인스턴스. 디코딩 또는 검증에 실패하면 None을 반환하며,
        호출자는 None을 보고 안전한 기본값으로 대체합니다.
    """
    decoded = decode_json_object(raw)
    if decoded is None:
        return None
    try:
        return schema.model_validate(decoded)
    except ValidationError:
        return None


def validate_or_salvage(item: Any, model: Type[T]) -> Optional[T]:
    """
    레코드 하나를 모델로 검증합니다. 일부 필드만 잘못되었다면 그 필드를 버리고
    기본값으로 다시 검증해 레코드 자체는 살립니다.

    Returns:
        모델 인스턴스. 딕셔너리가 아니거나 필드를 버려도 검증할 수 없으면 None.
    """
    if isinstance(item, model):
        return item
    if not isinstance(item, dict):
        return None
    try:
        return model.model_validate(item)
    except ValidationError as e:
        bad_keys = {str(error["loc"][0]) for error in e.errors() if error.get("loc")}

    # 오류 위치는 별칭으로 보고될 수 있으므로 필드 이름과 별칭을 함께 버립니다.
    for name, field in model.model_fields.items():
        if name in bad_keys and field.alias:
            bad_keys.add(field.alias)
        elif field.alias in bad_keys:
            bad_keys.add(name)
    salvaged = {key: value for key, value in item.items() if key not in bad_keys}
    if not bad_keys or len(salvaged) == len(item):
        return None
    try:
        return model.model_validate(salvaged)
    except ValidationError:
        return None


def to_int(value: Any, default: int) -> int:
    """'100', 100, 100.0 같은 값을 정수로 바꿉니다. 실패하면 default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
