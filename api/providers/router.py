"""
Provider metadata endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from .aggregator import JokeAggregator
from .dependencies import get_aggregator

router = APIRouter()


@router.get("/providers")
async def list_providers(aggregator: JokeAggregator = Depends(get_aggregator)) -> dict:
    providers = [
        {
            "name": info.name,
            "base_url": info.base_url,
            "categories": sorted(info.categories),
        }
        for info in aggregator.get_providers()
    ]
    return {"providers": providers, "count": len(providers)}


@router.get("/providers/categories")
async def list_categories(aggregator: JokeAggregator = Depends(get_aggregator)) -> dict:
    categories = aggregator.get_all_categories()
    return {"categories": categories, "count": len(categories)}
