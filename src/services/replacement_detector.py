"""Media replacement heuristics.

메타데이터 갱신이 실제 파일 교체인지, 단순 메타데이터 수정인지 판단합니다.
"""

from src.models.media_asset import MediaMetadata

# 파일 크기 차이가 이 값(바이트)을 초과하면 교체로 판단
FILESIZE_DELTA_THRESHOLD = 1000


def looks_like_replacement(
    old_meta: MediaMetadata | None, new_meta: MediaMetadata | None
) -> bool:
    """파일 교체 여부 판단.

    다음 중 하나라도 만족하면 교체로 판단합니다:
    - 파일 크기 차이 > FILESIZE_DELTA_THRESHOLD
    - 가로/세로 크기 변경
    - 저장된 파일명 변경

    이전 메타데이터가 없으면 (최초 생성) 교체가 아닙니다.

    Args:
        old_meta: 갱신 전 메타데이터
        new_meta: 갱신 후 메타데이터

    Returns:
        교체로 판단되면 True
    """
    if old_meta is None or new_meta is None:
        return False

    if old_meta.filesize is not None and new_meta.filesize is not None:
        if abs(new_meta.filesize - old_meta.filesize) > FILESIZE_DELTA_THRESHOLD:
            return True

    if _changed(old_meta.width, new_meta.width) or _changed(
        old_meta.height, new_meta.height
    ):
        return True

    return _changed(old_meta.file, new_meta.file)


def _changed(old: int | str | None, new: int | str | None) -> bool:
    # 한쪽 값이 없으면 비교하지 않음
    if old is None or new is None or old == "" or new == "":
        return False
    return old != new
