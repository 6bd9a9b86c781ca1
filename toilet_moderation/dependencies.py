from fastapi import Depends, Request

from toilet_moderation.reports.targets import StoreOwnerResolver
from toilet_moderation.storage.store import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_resolver(store: DocumentStore = Depends(get_store)) -> StoreOwnerResolver:
    return StoreOwnerResolver(store)
