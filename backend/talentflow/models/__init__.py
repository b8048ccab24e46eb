from talentflow.models.store_entry import StoreEntry

__all__ = ["StoreEntry"]
