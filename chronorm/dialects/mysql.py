"""MySQL dialect."""

import urllib.parse
from typing import Any, ClassVar, Sequence

from ..schema import MysqlTranslator
from .base import Dialect, Executor


class MysqlDialect(Dialect):
    """Dialect for MySQL (scheme mysql)."""

    SUPPORTED_SCHEMA: ClassVar[tuple[str, ...]] = ("mysql",)
    QUOTE_CHAR: ClassVar[str] = "`"
    PLACEHOLDER: ClassVar[str] = "%s"

    def connect(self, url: str):
        import pymysql  # pylint: disable=import-outside-toplevel,import-error
        parsed = urllib.parse.urlparse(url)
        return pymysql.connect(
            host=parsed.hostname,
            user=parsed.username,
            password=parsed.password,
            database=(parsed.path or "")[1:] or None,
            port=parsed.port or 3306,
            client_flag=pymysql.constants.CLIENT.MULTI_STATEMENTS,
        )

    def schema_translator(self) -> MysqlTranslator:
        return MysqlTranslator()

    def insert_returning_id(self, executor: Executor, sql: str, values: Sequence[Any], id_field: str) -> Any:
        # no RETURNING in MySQL
        executor.execute(self.translate_sql(sql), values)
        rows = executor.fetch("SELECT LAST_INSERT_ID()")
        return rows[0][0]
