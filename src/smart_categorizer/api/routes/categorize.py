from typing import Annotated

from fastapi import APIRouter, Depends

from smart_categorizer.api.dependencies import get_engine
from smart_categorizer.api.schemas import (
    CategorizeBatchRequest,
    CategorizeRequest,
    CategorizeResponse,
)
from smart_categorizer.manager import CategorizationEngine

router = APIRouter()


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize_transaction(
    req: CategorizeRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> CategorizeResponse:
    result = engine.categorize(req.transaction)
    return CategorizeResponse(transaction_id=req.transaction.id, result=result)


@router.post("/categorize/batch", response_model=list[CategorizeResponse])
async def categorize_batch(
    req: CategorizeBatchRequest,
    engine: Annotated[CategorizationEngine, Depends(get_engine)],
) -> list[CategorizeResponse]:
    results = engine.categorize_batch(req.transactions)
    return [
        CategorizeResponse(transaction_id=transaction.id, result=result)
        for transaction, result in zip(req.transactions, results)
    ]
