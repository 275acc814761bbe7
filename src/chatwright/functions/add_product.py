"""Sample function: add a product to the catalogue."""

from __future__ import annotations

import uuid
from typing import Any

from loguru import logger

from chatwright.functions.registry import FunctionDefinition, QAExample
from chatwright.render import TextRender

ADD_PRODUCT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "The name of the item to add"},
        "type": {
            "type": "string",
            "enum": ["product", "feature"],
            "description": "The type of the item to add. Can be 'product' or 'feature'",
        },
        "description": {"type": "string", "description": "The description of the item to add"},
        "price": {"type": "number", "description": "The price of the item to add"},
    },
    "required": ["name", "type", "description", "price"],
    "additionalProperties": False,
}

ADD_PRODUCT_EXAMPLE = QAExample(
    q='I want to create a new product with the name "My best T-Shirt"',
    a="""```json
{
  "functionName": "add_product",
  "missingFields": ["type", "description", "price"],
  "knownFields": {"name": "My best T-Shirt"}
}
```""",
)


async def add_product(args: dict[str, Any]) -> dict[str, Any]:
    product_id = uuid.uuid4().hex[:9].upper()
    logger.info("add_product.created id={} name={}", product_id, args.get("name"))
    return {
        "message": f"Product {args['name']} added",
        "data": {"productId": product_id, **args},
    }


ADD_PRODUCT = FunctionDefinition(
    name="add_product",
    description="Add a product to the database",
    json_schema=ADD_PRODUCT_SCHEMA,
    action=add_product,
    ui_response=TextRender(content="Product added"),
    qa_examples=(ADD_PRODUCT_EXAMPLE,),
)
