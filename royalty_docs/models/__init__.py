from royalty_docs.models.user import User, UserRole
from royalty_docs.models.user_session import UserSession
from royalty_docs.models.artist import Artist
from royalty_docs.models.release import Release, Demo
from royalty_docs.models.contract import Contract, ContractStatus
from royalty_docs.models.contract_split import ContractSplit
from royalty_docs.models.label_settings import LabelSettings

__all__ = [
    # Accounts
    "User",
    "UserRole",
    "UserSession",
    # Catalog
    "Artist",
    "Release",
    "Demo",
    # Contracts
    "Contract",
    "ContractStatus",
    "ContractSplit",
    "LabelSettings",
]
