# models/base_models.py

from typing import Annotated, Any, List

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    API の入出力は camelCase（wordCount, seoAnalysis など）で統一する。
    Python 側では snake_case の属性名でそのまま扱えるようにしている。
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ------------------------------------------------------------
# LLM 出力を緩く受けるための型
# （score が数値で返る、配列が文字列 1 つで返る、などを吸収する）
# ------------------------------------------------------------


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_text_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [_as_text(v) for v in value if v is not None]
    return value


LooseText = Annotated[str, BeforeValidator(_as_text)]
LooseTextList = Annotated[List[str], BeforeValidator(_as_text_list)]
