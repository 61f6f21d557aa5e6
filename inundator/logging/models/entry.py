from typing import Any

import msgspec

from .log_level import LogLevel


class Entry(msgspec.Struct, kw_only=True):
    message: str
    level: LogLevel = LogLevel.INFO

    def to_template(
        self,
        template: str,
        context: dict[str, Any] | None = None,
    ) -> str:
        if context is None:
            context = {}

        fields = {
            field_name: getattr(self, field_name)
            for field_name in self.__struct_fields__
        }
        fields["level"] = self.level.value

        return template.format(
            **context,
            **fields,
        )
