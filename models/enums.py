from enum import Enum

class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

class SchemaMode(str, Enum):
    NONE = "none"
    UPDATE = "update"
    CREATE = "create"
