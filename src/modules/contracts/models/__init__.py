from .access_token import GuestAccessToken
from .contract import Contract, ContractStatus
from .template import ContractTemplate

__all__ = ['Contract', 'ContractStatus', 'ContractTemplate', 'GuestAccessToken']
