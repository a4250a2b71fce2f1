"""
Sticker Catalog
===============

Example jettons and tracked projects served by the catalog endpoints. The
tables are built once at application startup and exposed read-only.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping

from stickers.models.schemas import Price, Project, Token


@dataclass(frozen=True)
class Catalog:
    """Read-only token and project tables keyed by symbol or name."""

    tokens: Mapping[str, Token]
    projects: Mapping[str, Project]

    def token_list(self) -> List[Token]:
        return list(self.tokens.values())

    def project_list(self) -> List[Project]:
        return list(self.projects.values())


def default_catalog() -> Catalog:
    """Build the catalog shipped with the service."""
    tokens = {
        "FNZ": Token(
            price=Price(usd=0.003425, ton=0.001433),
            delta=-4.52,
            logo_url="https://api.redoubt.online/v1/jettons/image/EQDCJL0iQHofcBBvFBHdVG233Ri2V4kCNFgfRT-gqAd3Oc86",
            symbol="FNZ",
            chart_url="https://charts.redoubt.online/656da184-70b5-4af4-8db1-775ddc49969d_usd.svg",
        ),
        "GLINT": Token(
            price=Price(ton=0.06631, usd=0.1585),
            delta=-7.59,
            logo_url="https://api.redoubt.online/v1/jettons/image/EQCBdxpECfEPH2wUxi1a6QiOkSf-5qDjUWqLCUuKtD-GLINT",
            symbol="GLINT",
            chart_url="https://charts.redoubt.online/44c3ae89-4aa0-4bfb-b048-06d4a770785e_usd.svg",
        ),
        "PUNK": Token(
            price=Price(ton=0.2208, usd=0.5278),
            delta=0.73,
            logo_url="https://api.redoubt.online/v1/jettons/image/EQCdpz6QhJtDtm2s9-krV2ygl45Pwl-KJJCV1-XrP-Xuuxoq",
            symbol="PUNK",
            chart_url="https://charts.redoubt.online/fd6a3803-dc0f-4b10-85dc-178307243408_usd.svg",
        ),
    }
    projects = {
        "Tonstakers": Project(
            name="Tonstakers",
            logo_url="https://redoubt.online/share/tondata/icons/tonstakers.svg",
            uaw=1109,
            uaw_delta=24.47,
            chart_url="https://charts.redoubt.online/tracker/tonstakers_w.svg",
        ),
        "Ston.fi": Project(
            name="Ston.fi",
            logo_url="https://redoubt.online/share/tondata/icons/ston.fi.png",
            uaw=2683,
            uaw_delta=43.02,
            chart_url="https://charts.redoubt.online/tracker/ston.fi_w.svg",
        ),
        "Storm Trade": Project(
            name="Storm Trade",
            logo_url="https://redoubt.online/share/tondata/icons/storm.png",
            uaw=144,
            uaw_delta=21.01,
            chart_url="https://charts.redoubt.online/tracker/storm_w.svg",
        ),
    }
    return Catalog(tokens=MappingProxyType(tokens), projects=MappingProxyType(projects))
