from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from shg.db.base import get_db
from shg.core.dependencies import get_viewing_user_id, get_period_filter
from shg.models.transaction import TransactionType
from shg.schemas.summary import IntegrityIssue, PeriodFilter
from shg.schemas.transaction import (
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionWriteResponse,
    LoanStatusChangeResponse,
    BulkDepositRequest,
    BulkDepositResponse,
    BulkDepositChunk,
)
from shg.services.store import list_members, list_transactions
from shg.services.summary import find_integrity_issues
from shg.services.transaction import (
    TransactionResult,
    add_transaction,
    edit_transaction,
    delete_transaction,
    bulk_deposit,
    filter_transactions,
)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


def _write_response(result: TransactionResult) -> TransactionWriteResponse:
    return TransactionWriteResponse(
        transaction=TransactionResponse.model_validate(result.transaction) if result.transaction else None,
        loan_status_changes=[LoanStatusChangeResponse.model_validate(c) for c in result.status_changes],
        reopened_loans=result.reopened_loans,
    )


@router.get("", response_model=List[TransactionResponse])
def list_transactions_endpoint(
    type: Optional[TransactionType] = None,
    q: Optional[str] = None,
    period: PeriodFilter = Depends(get_period_filter),
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """List transactions newest first, filtered by period, type and search text."""
    return filter_transactions(
        list_transactions(db, group_id),
        list_members(db, group_id),
        period=period,
        tx_type=type,
        query=q,
    )


@router.post("", response_model=TransactionWriteResponse, status_code=status.HTTP_201_CREATED)
def create_transaction_endpoint(
    tx_data: TransactionCreate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    result = add_transaction(
        db=db,
        group_id=group_id,
        member_id=tx_data.member_id,
        tx_type=tx_data.type,
        amount=tx_data.amount,
        tx_date=tx_data.date,
        description=tx_data.description,
        principal=tx_data.principal,
        interest=tx_data.interest,
        loan_id=tx_data.loan_id,
        interest_rate=tx_data.interest_rate,
    )
    return _write_response(result)


@router.post("/bulk-deposit", response_model=BulkDepositResponse)
def bulk_deposit_endpoint(
    bulk_data: BulkDepositRequest,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Record the same deposit for many members. Failed chunks are listed, not retried."""
    result = bulk_deposit(
        db=db,
        group_id=group_id,
        member_ids=bulk_data.member_ids,
        amount=bulk_data.amount,
        deposit_date=bulk_data.date,
        description=bulk_data.description,
    )
    return BulkDepositResponse(
        recorded=len(result.recorded_member_ids),
        failed=len(result.failed_member_ids),
        chunks=[BulkDepositChunk.model_validate(c) for c in result.chunks],
    )


@router.get("/integrity", response_model=List[IntegrityIssue])
def integrity_report_endpoint(
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Orphaned repayments and transactions that reference unknown members."""
    return find_integrity_issues(list_transactions(db, group_id), list_members(db, group_id))


@router.patch("/{transaction_id}", response_model=TransactionWriteResponse)
def update_transaction_endpoint(
    transaction_id: str,
    tx_data: TransactionUpdate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    result = edit_transaction(
        db=db,
        group_id=group_id,
        transaction_id=transaction_id,
        amount=tx_data.amount,
        tx_date=tx_data.date,
        description=tx_data.description,
        principal=tx_data.principal,
        interest=tx_data.interest,
        loan_id=tx_data.loan_id,
        interest_rate=tx_data.interest_rate,
    )
    return _write_response(result)


@router.delete("/{transaction_id}", response_model=TransactionWriteResponse)
def delete_transaction_endpoint(
    transaction_id: str,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Delete a transaction. A deleted repayment may reopen its loan."""
    result = delete_transaction(db, group_id, transaction_id, deleted_by=group_id)
    return _write_response(result)
