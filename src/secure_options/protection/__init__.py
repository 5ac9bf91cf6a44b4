"""
secure-options protection module.

Classifies settings types, walks object graphs and adapts cryptographic
protectors.
"""

from secure_options.protection.classifier import (
    DeclaredField,
    FieldClassifier,
    classify,
    declared_fields,
    register_fields,
    unwrap_annotation,
)
from secure_options.protection.protectors import (
    AesGcmProtector,
    FernetProtector,
    Protector,
    create_protector,
)
from secure_options.protection.walker import (
    GraphWalker,
    WalkDirection,
    WalkResult,
    decrypt_properties,
    encrypt_properties,
)

__all__ = [
    # Classifier
    "DeclaredField",
    "FieldClassifier",
    "classify",
    "declared_fields",
    "register_fields",
    "unwrap_annotation",
    # Protectors
    "AesGcmProtector",
    "FernetProtector",
    "Protector",
    "create_protector",
    # Walker
    "GraphWalker",
    "WalkDirection",
    "WalkResult",
    "decrypt_properties",
    "encrypt_properties",
]
