from .models import TestCase, TestCaseConfig, TestVector


def _five_digits(value) -> bool:
    return isinstance(value, str) and len(value) == 5 and value.isdigit()


USER_OBJECT_SCHEMA = {
    "type": "object",
    "required": ["name", "age", "email"],
    "properties": {
        "name": {"type": "string"},
        "age": {"type": "number"},
        "email": {"type": "string"},
        "active": {"type": "boolean"},
        "tags": {"type": "array", "items": {"type": "string"}},
    },
}

PRODUCT_OBJECT_SCHEMA = {
    "type": "object",
    "required": ["id", "name", "price"],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "price": {"type": "number"},
        "description": {"type": "string"},
        "inStock": {"type": "boolean"},
        "categories": {"type": "array", "items": {"type": "string"}},
    },
}

ORDER_OBJECT_SCHEMA = {
    "type": "object",
    "required": ["orderId", "status", "items"],
    "properties": {
        "orderId": {"type": "string"},
        "status": {"type": "string"},
        "items": {"type": "array", "items": {"type": "string"}},
        "express": {"type": "boolean"},
        "shipping": {
            "type": "object",
            "properties": {
                "city": {"type": "string"},
                "zip": {"type": "string"},
            },
        },
    },
}

_ANN = {"name": "Ann", "age": 30, "email": "ann@example.com"}

TEST_CASES = [
    TestCase(
        name="User",
        objectJsonSchema=USER_OBJECT_SCHEMA,
        configs=[
            TestCaseConfig(
                name="basic",
                checkDescription=(
                    "User object with required name (string, 2-50 chars), age (number, 18-120), "
                    "email (string, min 5 chars), optional active (boolean), and optional tags "
                    "(array of strings, max 10 items)"
                ),
                referenceConfig={
                    "name": {"type": "string", "minLength": 2, "maxLength": 50},
                    "age": {"type": "number", "min": 18, "max": 120},
                    "email": {"type": "string", "minLength": 5},
                    "active": {"type": "boolean"},
                    "tags": {"type": "array", "maxItems": 10},
                },
                testData=[
                    TestVector(
                        data={
                            "name": "John Doe",
                            "age": 30,
                            "email": "john@example.com",
                            "active": True,
                            "tags": ["developer", "python"],
                        },
                        expectedResult=True,
                    ),
                    TestVector(
                        data={"name": "Jane Smith", "age": 25, "email": "jane.smith@example.com"},
                        expectedResult=True,
                    ),
                    TestVector(
                        data={"name": "Bob", "age": 45, "email": "bob@test.co", "active": False, "tags": ["designer"]},
                        expectedResult=True,
                    ),
                    TestVector(
                        data={
                            "name": "Alice Johnson",
                            "age": 18,
                            "email": "alice@example.org",
                            "tags": list("abcdefghij"),
                        },
                        expectedResult=True,
                        description="boundary values",
                    ),
                    TestVector(data={"name": "A", "age": 15, "email": "test"}, expectedResult=False),
                    TestVector(
                        data={"name": "Valid Name", "age": 17, "email": "valid@example.com"},
                        expectedResult=False,
                        description="too young",
                    ),
                    TestVector(
                        data={"name": "Valid Name", "age": 121, "email": "valid@example.com"},
                        expectedResult=False,
                        description="too old",
                    ),
                    TestVector(data={"name": "Valid Name", "age": 30, "email": "ab"}, expectedResult=False),
                    TestVector(
                        data={"name": "Valid Name", "age": 30, "email": "valid@example.com", "tags": ["tag"] * 11},
                        expectedResult=False,
                        description="too many tags",
                    ),
                    TestVector(
                        data={"age": 30, "email": "valid@example.com"},
                        expectedResult=False,
                        description="name missing",
                    ),
                ],
            ),
            TestCaseConfig(
                name="strictTags",
                checkDescription=(
                    "User object with required name, age and email; optional tags (array of "
                    "strings, 1-3 items) and optional active (boolean)"
                ),
                referenceConfig={
                    "tags": {"type": "array", "minItems": 1, "maxItems": 3},
                    "active": {"type": "boolean"},
                },
                testData=[
                    TestVector(data=_ANN, expectedResult=True),
                    TestVector(data={**_ANN, "tags": ["x"]}, expectedResult=True),
                    TestVector(data={**_ANN, "tags": ["a", "b", "c"], "active": False}, expectedResult=True),
                    TestVector(data={**_ANN, "tags": []}, expectedResult=False, description="empty tags"),
                    TestVector(data={**_ANN, "tags": ["a", "b", "c", "d"]}, expectedResult=False),
                    TestVector(data={**_ANN, "active": "true"}, expectedResult=False, description="active as string"),
                    TestVector(data={"age": 30, "email": "ann@example.com"}, expectedResult=False),
                ],
            ),
        ],
    ),
    TestCase(
        name="Product",
        objectJsonSchema=PRODUCT_OBJECT_SCHEMA,
        configs=[
            TestCaseConfig(
                name="basic",
                checkDescription=(
                    "Product object with required id (string), name (string, 3-100 chars), price "
                    "(number, min 0), optional description (string, max 500 chars), optional inStock "
                    "(boolean), and optional categories (array of strings)"
                ),
                referenceConfig={
                    "id": {"type": "string"},
                    "name": {"type": "string", "minLength": 3, "maxLength": 100},
                    "price": {"type": "number", "min": 0},
                    "description": {"type": "string", "maxLength": 500},
                    "inStock": {"type": "boolean"},
                    "categories": {"type": "array"},
                },
                testData=[
                    TestVector(
                        data={
                            "id": "prod-123",
                            "name": "Laptop",
                            "price": 999.99,
                            "description": "High-performance laptop for developers",
                            "inStock": True,
                            "categories": ["electronics", "computers"],
                        },
                        expectedResult=True,
                    ),
                    TestVector(
                        data={"id": "prod-456", "name": "Wireless Mouse", "price": 29.99, "inStock": False},
                        expectedResult=True,
                    ),
                    TestVector(
                        data={
                            "id": "prod-789",
                            "name": "Keyboard",
                            "price": 0,
                            "description": "Mechanical keyboard",
                            "categories": ["electronics"],
                        },
                        expectedResult=True,
                    ),
                    TestVector(
                        data={"id": "prod-abc", "name": "A" + "B" * 98, "price": 1000, "description": "A" * 500},
                        expectedResult=True,
                        description="boundary lengths",
                    ),
                    TestVector(data={"id": "prod-456", "name": "AB", "price": -10}, expectedResult=False),
                    TestVector(data={"id": "prod-xyz", "name": "AB", "price": 50}, expectedResult=False),
                    TestVector(data={"id": "prod-xyz", "name": "A" + "B" * 100, "price": 50}, expectedResult=False),
                    TestVector(
                        data={"id": "prod-xyz", "name": "Valid Product", "price": 50, "description": "A" * 501},
                        expectedResult=False,
                    ),
                    TestVector(data={"name": "Valid Product", "price": 50}, expectedResult=False, description="id missing"),
                    TestVector(data={"id": "prod-xyz", "price": 50}, expectedResult=False, description="name missing"),
                ],
            ),
        ],
    ),
    TestCase(
        name="Order",
        objectJsonSchema=ORDER_OBJECT_SCHEMA,
        configs=[
            TestCaseConfig(
                name="shipping",
                checkDescription=(
                    "Order object with required orderId (string), status (one of 'pending', "
                    "'shipped', 'delivered'), items (array, 1-20 items), optional express (boolean), "
                    "and an optional shipping object whose optional city is a string of at least 2 "
                    "chars and whose optional zip is a string of exactly 5 digits"
                ),
                referenceConfig={
                    "orderId": {"type": "string"},
                    "status": {"type": "oneOf", "values": ["pending", "shipped", "delivered"]},
                    "items": {"type": "array", "minItems": 1, "maxItems": 20},
                    "express": {"type": "boolean"},
                    "shipping": {
                        "city": {"type": "string", "minLength": 2},
                        "zip": {"type": "custom", "check": _five_digits},
                    },
                },
                testData=[
                    TestVector(data={"orderId": "o-1", "status": "pending", "items": ["a"]}, expectedResult=True),
                    TestVector(
                        data={
                            "orderId": "o-2",
                            "status": "shipped",
                            "items": ["a", "b"],
                            "express": True,
                            "shipping": {"city": "Oslo", "zip": "01500"},
                        },
                        expectedResult=True,
                    ),
                    TestVector(
                        data={"orderId": "o-3", "status": "delivered", "items": ["x"] * 20, "shipping": {"city": "Lima"}},
                        expectedResult=True,
                        description="zip is optional",
                    ),
                    TestVector(
                        data={"orderId": "o-4", "status": "lost", "items": ["a"]},
                        expectedResult=False,
                        description="unknown status",
                    ),
                    TestVector(data={"orderId": "o-5", "status": "pending", "items": []}, expectedResult=False),
                    TestVector(
                        data={"orderId": "o-6", "status": "delivered", "items": ["a"], "shipping": {"city": "X", "zip": "01500"}},
                        expectedResult=False,
                    ),
                    TestVector(
                        data={"orderId": "o-7", "status": "delivered", "items": ["a"], "shipping": {"city": "Bergen", "zip": "123"}},
                        expectedResult=False,
                    ),
                    TestVector(
                        data={"orderId": "o-8", "status": "shipped", "items": ["a"], "shipping": {"zip": "12a45"}},
                        expectedResult=False,
                        description="zip with a letter",
                    ),
                    TestVector(
                        data={"orderId": "o-9", "status": "pending", "items": ["a"], "shipping": "Oslo"},
                        expectedResult=False,
                        description="shipping is not an object",
                    ),
                    TestVector(
                        data={"orderId": "o-10", "status": "pending", "items": ["a"], "express": "yes"},
                        expectedResult=False,
                    ),
                    TestVector(data={"status": "pending", "items": ["a"]}, expectedResult=False, description="orderId missing"),
                ],
            ),
        ],
    ),
]
