# Typed cell and value formatters shared by the renderers.

DEFAULT_DATABASE = "<default>"


def fmt_float(value: float) -> str:
    return f"{value:.3f}"


def fmt_count(value: int) -> str:
    return f"{float(value):.3f}"


def quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def to_ms(micros: float) -> float:
    return micros / 1000.0


def fmt_percent(completeness: float) -> str:
    return f"{completeness * 100:.2f}%"


def database_label(database_name: str) -> str:
    return database_name or DEFAULT_DATABASE
