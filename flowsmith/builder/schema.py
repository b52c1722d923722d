#flowsmith/builder/schema.py
# Wire contract of a generated workflow document, as the n8n engine loads it.
WORKFLOW_DOCUMENT_SCHEMA = {
    "type": "object",
    "required": ["name", "nodes", "connections", "meta"],
    "properties": {
        "name": {
            "type": "string"
        },
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["parameters", "name", "type", "typeVersion", "position"],
                "properties": {
                    "parameters": {
                        "type": "object"
                    },
                    "name": {
                        "type": "string",
                        "minLength": 1
                    },
                    "type": {
                        "type": "string",
                        # n8n package-qualified node type, e.g. n8n-nodes-base.webhook
                        "pattern": "^[A-Za-z0-9_-]+\\.[A-Za-z0-9_.-]+$"
                    },
                    "typeVersion": {
                        "type": "integer",
                        "minimum": 1
                    },
                    # [x, y] canvas coordinates
                    "position": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "minItems": 2,
                        "maxItems": 2
                    },
                    # Opaque credential binding, passed through untouched
                    "credentials": {
                        "type": "object"
                    },
                    "webhookId": {
                        "type": "string"
                    }
                },
                "additionalProperties": False
            },
            "minItems": 1
        },

        "connections": {
            "type": "object",

            # Top-level keys: source node names
            "patternProperties": {
                "^.+$": {
                    "type": "object",

                    # Inner keys: connection kinds (e.g., "main")
                    "patternProperties": {
                        "^.+$": {
                            "type": "array",
                            # One array per output port
                            "items": {
                                "type": "array",
                                "items": {
                                    "type": "object",
                                    "required": ["node", "type", "index"],
                                    "properties": {
                                        "node": {"type": "string", "minLength": 1},
                                        "type": {"type": "string"},
                                        "index": {
                                            "type": "integer",
                                            "minimum": 0
                                        }
                                    },
                                    "additionalProperties": False
                                }
                            },
                            "minItems": 1
                        }
                    },

                    "additionalProperties": False
                }
            },

            "additionalProperties": False
        },

        "meta": {
            "type": "object",
            "required": ["instanceId"],
            "properties": {
                "instanceId": {"type": "string"}
            }
        }
    },
    "additionalProperties": False
}
