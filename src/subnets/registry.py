from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from reporting.targets import validate_subnet


class RegistryError(ValueError):
    """Raised when a subnet registry file cannot be used."""


@dataclass(frozen=True)
class SubnetInfo:
    """One vantage point: the ECS prefix we pretend to query from."""
    country: str
    region: str
    province: str
    isp: str
    subnet: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _cn(region: str, province: str, isp: str, subnet: str) -> SubnetInfo:
    return SubnetInfo(country="China", region=region, province=province, isp=isp, subnet=subnet)


DEFAULT_SUBNETS: Tuple[SubnetInfo, ...] = (
    _cn("North China", "Beijing", "China Telecom", "219.141.136.0/24"),
    _cn("North China", "Beijing", "China Unicom", "123.125.81.0/24"),
    _cn("North China", "Beijing", "China Mobile", "211.136.28.0/24"),
    _cn("North China", "Tianjin", "China Unicom", "125.36.0.0/24"),
    _cn("East China", "Shanghai", "China Telecom", "101.226.4.0/24"),
    _cn("East China", "Shanghai", "China Unicom", "112.64.0.0/24"),
    _cn("East China", "Shanghai", "China Mobile", "117.131.0.0/24"),
    _cn("East China", "Zhejiang", "China Telecom", "115.236.0.0/24"),
    _cn("East China", "Jiangsu", "China Mobile", "112.4.0.0/24"),
    _cn("South China", "Guangdong", "China Telecom", "113.96.0.0/24"),
    _cn("South China", "Guangdong", "China Unicom", "112.90.0.0/24"),
    _cn("South China", "Guangdong", "China Mobile", "120.196.0.0/24"),
    _cn("Central China", "Hubei", "China Telecom", "59.172.0.0/24"),
    _cn("Central China", "Henan", "China Unicom", "123.52.0.0/24"),
    _cn("Southwest China", "Sichuan", "China Telecom", "101.249.112.0/24"),
    _cn("Southwest China", "Chongqing", "China Mobile", "183.230.0.0/24"),
    _cn("Northwest China", "Shaanxi", "China Telecom", "113.140.0.0/24"),
    _cn("Northeast China", "Liaoning", "China Unicom", "113.224.0.0/24"),
    SubnetInfo("Hong Kong", "Asia", "Hong Kong", "HKT", "203.198.0.0/24"),
    SubnetInfo("Japan", "Asia", "Tokyo", "NTT", "153.120.0.0/24"),
    SubnetInfo("Singapore", "Asia", "Singapore", "Singtel", "118.189.0.0/24"),
    SubnetInfo("United States", "North America", "California", "Comcast", "73.15.0.0/24"),
    SubnetInfo("Germany", "Europe", "Hesse", "Deutsche Telekom", "79.192.0.0/24"),
)

_FIELDS = ("country", "region", "province", "isp", "subnet")


def _entry_from_dict(item: Any, index: int) -> SubnetInfo:
    if not isinstance(item, dict):
        raise RegistryError(f"entry {index}: expected an object")
    missing = [f for f in _FIELDS if not isinstance(item.get(f), str) or not item.get(f).strip()]
    if missing:
        raise RegistryError(f"entry {index}: missing or empty field(s): {', '.join(missing)}")

    info = SubnetInfo(**{f: item[f].strip() for f in _FIELDS})
    # entries end up on the dig command line
    err = validate_subnet(info.subnet)
    if err:
        raise RegistryError(f"entry {index}: {err}")
    return info


def load_registry(path: Optional[str] = None) -> Tuple[SubnetInfo, ...]:
    """
    Return the subnet registry.

    Without a path the built-in DEFAULT_SUBNETS are used. With a path, the file
    must hold a JSON list of objects carrying the five SubnetInfo fields.
    """
    if not path:
        return DEFAULT_SUBNETS

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RegistryError(f"cannot read subnet registry {path}: {e}") from e

    if not isinstance(raw, list) or not raw:
        raise RegistryError(f"subnet registry {path} must be a non-empty JSON list")

    entries: List[SubnetInfo] = [_entry_from_dict(item, i) for i, item in enumerate(raw)]
    return tuple(entries)
