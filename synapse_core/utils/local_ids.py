# synapse_core/utils/local_ids.py
import uuid

# 원격 ID 공간과 겹치지 않도록 로컬에서 만든 ID에는 항상 이 접두사를 붙입니다.
LOCAL_ID_PREFIX = "local-"


def new_local_id(kind: str) -> str:
    """
    낙관적(optimistic) 로컬 엔티티를 위한 ID를 생성합니다.

    예: new_local_id("vm") -> "local-vm-3f2a9c1e0b7d"
    """
    return f"{LOCAL_ID_PREFIX}{kind}-{uuid.uuid4().hex[:12]}"


def is_local_id(entity_id: str) -> bool:
    """원격 확인을 받지 않은 로컬 엔티티의 ID인지 확인합니다."""
    return isinstance(entity_id, str) and entity_id.startswith(LOCAL_ID_PREFIX)
