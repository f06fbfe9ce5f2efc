"""Reference contract templates."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import repository
from app.db.session import get_db
from app.schemas.api import TemplateCreate, TemplateRecord
from app.schemas.domain import ContractType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.post("", response_model=TemplateRecord, status_code=201)
async def create_template(payload: TemplateCreate, db: AsyncSession = Depends(get_db)):
    contract_type = ContractType.parse(payload.contract_type)
    template = await db.run_sync(
        repository.create_template,
        name=payload.name,
        contract_type=contract_type.value,
        raw_text=payload.raw_text,
        description=payload.description,
    )
    await db.commit()
    logger.info("Created template %s (%s)", template.id, contract_type.value)
    return TemplateRecord.model_validate(template)


@router.get("", response_model=list[TemplateRecord])
async def list_templates(db: AsyncSession = Depends(get_db)):
    """Templates ordered by name."""
    rows = await db.run_sync(repository.list_templates)
    return [TemplateRecord.model_validate(row) for row in rows]


@router.delete("/{template_id}", status_code=204)
async def delete_template(template_id: str, db: AsyncSession = Depends(get_db)):
    await db.run_sync(repository.delete_template, template_id)
    await db.commit()
    logger.info("Deleted template %s", template_id)
