from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from shg.db.base import get_db
from shg.core.dependencies import get_viewing_user_id
from shg.schemas.member import (
    MemberCreate,
    MemberUpdate,
    MemberStatusUpdate,
    MemberResponse,
    MemberWithBalance,
    MemberDeleteResponse,
    PassbookResponse,
)
from shg.schemas.transaction import TransactionResponse
from shg.services.accounting import MemberBalance, get_member_balance
from shg.services.interest import build_passbook
from shg.services.member import (
    create_member,
    update_member,
    change_member_status,
    delete_member,
    format_aadhaar,
    list_members_with_balances,
)
from shg.services.store import get_member, list_members, list_member_transactions, list_transactions

router = APIRouter(prefix="/api/members", tags=["members"])


def _member_response(member) -> MemberResponse:
    response = MemberResponse.model_validate(member)
    response.aadhaar = format_aadhaar(member.aadhaar)
    return response


def _with_balance(member, balance: MemberBalance) -> MemberWithBalance:
    return MemberWithBalance(
        **_member_response(member).model_dump(),
        deposit_balance=balance.deposit_balance,
        loan_balance=balance.loan_balance,
    )


@router.get("", response_model=List[MemberWithBalance])
def list_members_endpoint(
    q: Optional[str] = None,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """List members with derived deposit and loan balances, optionally searched."""
    return [_with_balance(m, b) for m, b in list_members_with_balances(db, group_id, q)]


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
def create_member_endpoint(
    member_data: MemberCreate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    member = create_member(
        db=db,
        group_id=group_id,
        member_id=member_data.id,
        name=member_data.name,
        phone=member_data.phone,
        aadhaar=member_data.aadhaar,
        join_date=member_data.join_date,
        created_by=group_id,
    )
    return _member_response(member)


@router.get("/{member_id}", response_model=MemberWithBalance)
def get_member_endpoint(
    member_id: str,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    member = get_member(db, group_id, member_id)
    balance = get_member_balance(list_member_transactions(db, group_id, member_id), member_id)
    return _with_balance(member, balance)


@router.patch("/{member_id}", response_model=MemberResponse)
def update_member_endpoint(
    member_id: str,
    member_data: MemberUpdate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Edit member details; `new_id` also moves the member's transactions."""
    member = update_member(
        db=db,
        group_id=group_id,
        member_id=member_id,
        name=member_data.name,
        phone=member_data.phone,
        aadhaar=member_data.aadhaar,
        join_date=member_data.join_date,
        new_id=member_data.new_id,
        updated_by=group_id,
    )
    return _member_response(member)


@router.post("/{member_id}/status", response_model=MemberResponse)
def change_member_status_endpoint(
    member_id: str,
    status_data: MemberStatusUpdate,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    member = change_member_status(
        db=db,
        group_id=group_id,
        member_id=member_id,
        new_status=status_data.status,
        changed_by=group_id,
        reason=status_data.reason,
    )
    return _member_response(member)


@router.delete("/{member_id}", response_model=MemberDeleteResponse)
def delete_member_endpoint(
    member_id: str,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    """Delete a member and their transactions. Requires a zero loan balance."""
    deleted = delete_member(db, group_id, member_id, deleted_by=group_id)
    return {"message": f"Member {member_id} deleted", "deleted_transactions": deleted}


@router.get("/{member_id}/passbook", response_model=PassbookResponse)
def get_passbook_endpoint(
    member_id: str,
    group_id: str = Depends(get_viewing_user_id),
    db: Session = Depends(get_db)
):
    member = get_member(db, group_id, member_id)
    passbook = build_passbook(member, list_transactions(db, group_id), list_members(db, group_id))
    return PassbookResponse(
        member=_member_response(member),
        deposit_balance=passbook.deposit_balance,
        loan_balance=passbook.loan_balance,
        interest_share=passbook.interest_share,
        grand_total=passbook.grand_total,
        transactions=[TransactionResponse.model_validate(tx) for tx in passbook.transactions],
    )
