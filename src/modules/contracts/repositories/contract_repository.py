from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from modules.contracts.models.access_token import GuestAccessToken
from modules.contracts.models.contract import Contract, ContractStatus


class ContractRepository:
    """Data access for contracts and their guest tokens. Never commits."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def add(self, contract: Contract) -> Contract:
        self.db.add(contract)
        return contract

    def get(self, contract_id: str) -> Optional[Contract]:
        return self.db.get(Contract, contract_id)

    def list(self, status: Optional[ContractStatus] = None) -> List[Contract]:
        query = self.db.query(Contract).options(joinedload(Contract.access_token))
        if status is not None:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc()).all()

    def get_token(self, token: str) -> Optional[GuestAccessToken]:
        if not token:
            return None
        return (
            self.db
            .query(GuestAccessToken)
            .options(joinedload(GuestAccessToken.contract))
            .filter(GuestAccessToken.token == token)
            .first()
        )
