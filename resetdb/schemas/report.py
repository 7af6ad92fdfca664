from typing import List
from pydantic import BaseModel, Field
from resetdb.models.enums import Dialect

class FailedStatement(BaseModel):
    """
    A statement that failed but did not abort the reset.
    """
    statement: str
    error: str

class ResetReport(BaseModel):
    """
    Outcome of one reset run, statements listed in execution order.
    """
    dialect: Dialect
    succeeded: List[str] = Field(default_factory=list)
    failed: List[FailedStatement] = Field(default_factory=list)

    @property
    def drop_count(self) -> int:
        return sum(1 for statement in self.succeeded if statement.startswith("DROP "))

    model_config = {
        "json_schema_extra": {
            "example": {
                "dialect": "oracle",
                "succeeded": ['DROP VIEW "ACTIVE_USERS"', 'DROP TABLE "APP"."USERS" CASCADE CONSTRAINTS PURGE'],
                "failed": [
                    {
                        "statement": 'DROP INDEX "USERS_EMAIL_UK"',
                        "error": "ORA-02429: cannot drop index used for enforcement of unique/primary key"
                    }
                ]
            }
        }
    }
