"""Translation preview endpoints."""

from fastapi import APIRouter, HTTPException

from ...errors import RealtyDBError
from ...models.schema import Dialect
from ...services.translator import split_statements, translate_query, translate_schema
from ...services.validator import SchemaValidator
from ..models import (
    TranslateQueryRequest,
    TranslateQueryResponse,
    TranslateSchemaRequest,
    TranslateSchemaResponse,
    ValidationWarning,
)

router = APIRouter()


@router.post("/query", response_model=TranslateQueryResponse)
async def translate_query_preview(data: TranslateQueryRequest):
    """Show how a query would be sent to a backend."""
    try:
        statement = translate_query(data.query, data.params, Dialect(data.dialect.value))
    except RealtyDBError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return TranslateQueryResponse(
        sql=statement.sql,
        params=list(statement.params),
        placeholder_style=statement.style.value,
        placeholder_count=statement.placeholder_count,
    )


@router.post("/schema", response_model=TranslateSchemaResponse)
async def translate_schema_preview(data: TranslateSchemaRequest):
    """Translate a SQLite DDL script and report what PostgreSQL may reject."""
    ddl = translate_schema(data.ddl)
    warnings = []
    if data.validate_output:
        warnings = [
            ValidationWarning(**w.to_dict())
            for w in SchemaValidator().validate_script(ddl)
        ]
    return TranslateSchemaResponse(
        ddl=ddl,
        statements=len(split_statements(ddl)),
        warnings=warnings,
    )
