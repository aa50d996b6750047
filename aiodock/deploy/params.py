"""Deploy parameters dataclass."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DeployParams:
    """Values discovered or chosen once per run and injected into rendering."""

    public_ip: str
    certresolver: str = "cfdns"
    domain: str = ""  # empty: no public routing
