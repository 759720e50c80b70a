from __future__ import annotations

from dataclasses import dataclass

import mysql.connector


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str


class DatabaseConnection:
    """Opens a fresh MySQL connection per unit of work, with autocommit off.

    One instance is built per container, so each container talks to the
    database named in its own ``DBConfig``.
    """

    def __init__(self, config: DBConfig):
        self.config = config

    def connect(self):
        return mysql.connector.connect(
            host=self.config.host,
            port=int(self.config.port),
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            autocommit=False,
        )
