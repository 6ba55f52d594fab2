import typing as t

from envier import En


DEFAULT_CALL_TEMPLATE = "[ %TIME_STAMP% ] [ %EXECUTION_TIME% ] [ CALL  ] [ %DSN%;user=%USER_NAME% ] [ %SOURCE%(%ARGS%) ]"
DEFAULT_QUERY_TEMPLATE = (
    "[ %TIME_STAMP% ] [ %EXECUTION_TIME% ] [ QUERY ] [ %DSN%;user=%USER_NAME% ] [ #%COUNT% ] [ %SOURCE% ] [ %QUERY% ]"
)


def parse_sources(value: t.Union[str, None]) -> t.List[str]:
    if not isinstance(value, str):
        return []

    fragments = [s.strip() for s in value.split(",")]
    return [f for f in fragments if f != ""]


class ExcavatorConfig(En):
    """Process-wide defaults, read from ``EXCAVATOR_*`` environment variables.

    Per-connection debugging options are merged over these values.
    """

    __prefix__ = "excavator"

    enabled = En.v(
        bool,
        "enabled",
        default=True,
        help_type="Boolean",
        help="Instrument connections at all. When disabled, proxies call straight through to the driver",
    )

    sources = En.v(
        list,
        "sources",
        parser=parse_sources,
        default=[],
        help_type="List",
        help="Comma-separated default source filters. Entries starting with '/' are regular expressions",
    )

    class FormatConfig(En):
        __item__ = __prefix__ = "format"

        timestamp = En.v(
            str,
            "timestamp",
            default="%Y-%m-%d %H:%M:%S.%f",
            help_type="String",
            help="strftime pattern of the %TIME_STAMP% log variable",
        )

        precision = En.v(
            str,
            "precision",
            default="%.05f",
            help_type="String",
            help="printf-style pattern of the %EXECUTION_TIME% log variable (seconds)",
        )

        count = En.v(
            str,
            "count",
            default="%03d",
            help_type="String",
            help="printf-style pattern of the %COUNT% log variable",
        )

        call = En.v(
            str,
            "call",
            default=DEFAULT_CALL_TEMPLATE,
            help_type="String",
            help="Message template for calls that carry arguments",
        )

        query = En.v(
            str,
            "query",
            default=DEFAULT_QUERY_TEMPLATE,
            help_type="String",
            help="Message template for calls that carry a query",
        )

    def defaults(self) -> t.Dict[str, t.Any]:
        """The debugging option bag these settings describe."""
        return {
            "logger": None,
            "format": {
                "timestamp": self.format.timestamp,
                "precision": self.format.precision,
                "count": self.format.count,
                "call": self.format.call,
                "query": self.format.query,
            },
            "sources": list(self.sources),
        }


config = ExcavatorConfig()
