from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class BuildContext:
    """
    Shared pipeline context.
    This object is passed between orchestration layers.
    """

    config: Any
    logger: Any

    input_path: Optional[str] = None
    output_path: Optional[str] = None

    nested: bool = True
    include_auxiliary: bool = True

    stats: Dict[str, Any] = field(default_factory=dict)

    debug: bool = False
