"""Pydantic models for API requests and responses."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field
from enum import Enum


class DialectEnum(str, Enum):
    SQLITE = "sqlite"
    POSTGRES = "postgres"


class HealthResponse(BaseModel):
    status: str
    version: str


class DatabaseHealthResponse(BaseModel):
    status: str
    backend: Optional[str] = None
    dialect: Optional[DialectEnum] = None
    error: Optional[str] = None


# Request Models
class TranslateQueryRequest(BaseModel):
    query: str
    params: List[Any] = Field(default_factory=list)
    dialect: DialectEnum = DialectEnum.POSTGRES


class TranslateSchemaRequest(BaseModel):
    ddl: str
    validate_output: bool = True


# Response Models
class TranslateQueryResponse(BaseModel):
    sql: str
    params: List[Any]
    placeholder_style: str
    placeholder_count: int


class ValidationWarning(BaseModel):
    statement: str
    message: str
    error_type: str
    severity: str
    suggested_fix: Optional[str] = None


class TranslateSchemaResponse(BaseModel):
    ddl: str
    statements: int
    warnings: List[ValidationWarning] = Field(default_factory=list)
