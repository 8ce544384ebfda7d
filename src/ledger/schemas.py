"""
Wire models for the bid ledger API.

Field names on the wire are camelCase; models accept either form.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

WireId = Union[int, str]


class LedgerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class BidRecord(LedgerModel):
    """One bid as returned by ``GET /bid/item/{id}``"""

    bid_amount: int = Field(..., alias="bidAmount", ge=0)
    item_id: Optional[WireId] = Field(None, alias="itemId")
    customer_id: Optional[WireId] = Field(None, alias="customerId")


class ItemSnapshot(LedgerModel):
    """Item state the bidder saw when confirming"""

    id: WireId
    name: str
    description: str
    starting_price: int = Field(..., alias="startingPrice")
    current_bid: int = Field(..., alias="currentBid")


class CustomerSnapshot(LedgerModel):
    id: WireId
    username: str


class BidRequest(LedgerModel):
    """Body of ``POST /bid``"""

    item_id: WireId = Field(..., alias="itemId")
    bid_amount: int = Field(..., alias="bidAmount", gt=0)
    customer_id: WireId = Field(..., alias="customerId")
    image_base64: Optional[str] = Field(None, alias="imageBase64")
    item: ItemSnapshot
    customer: CustomerSnapshot

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class BidReceipt(LedgerModel):
    """Ledger confirmation of a committed bid"""

    item_id: WireId = Field(..., alias="itemId")
    bid_amount: int = Field(..., alias="bidAmount")


class SellerRef(LedgerModel):
    id: Optional[WireId] = None


class ItemListing(LedgerModel):
    """One row of ``GET /item``"""

    id: WireId
    name: str
    description: str = ""
    starting_price: int = Field(0, alias="startingPrice")
    image_base64: Optional[str] = Field(None, alias="imageBase64")
    status: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    seller_id: Optional[WireId] = Field(None, alias="sellerId")
    seller: Optional[SellerRef] = None

    @property
    def owner_id(self) -> Optional[WireId]:
        """Seller id from either the flat or the nested form."""
        if self.seller_id is not None:
            return self.seller_id
        if self.seller is not None:
            return self.seller.id
        return None


def parse_bid_records(payload) -> List[BidRecord]:
    """
    Parse a bid list response.

    Raises:
        ValueError: If the payload is not a list of bid records
    """
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of bids, got {type(payload).__name__}")
    return [BidRecord.model_validate(entry) for entry in payload]
