from dataclasses import dataclass, field
from typing import Annotated, Dict, List, Literal, Optional, Tuple

from typeforge import export_ts_class, ts_custom_base, TsType, TsDefaultValue

from tests.sample.models.users import User, Address


@dataclass
class OrderLine:
    sku: str
    quantity: int = 1
    unit_price: float = 0.0


@export_ts_class(output_dir="orders")
@ts_custom_base("AggregateRoot", import_path="../lib/aggregate", original_type_name="Root")
@dataclass
class Order:
    number: str
    lines: List[OrderLine]
    customer: Optional[User] = None
    shipping: Optional[Address] = None
    channel: Literal["web", "store"] = "web"
    paid: bool = False
    note: Annotated[str, TsDefaultValue("''")] = ""
    totals: Dict[str, float] = field(default_factory=dict)
    dimensions: Optional[Tuple[float, float, float]] = None
    placed_at: Annotated[str, TsType("Moment", import_path="moment")] = ""
