"""
Document-to-Framework Bridge

Converts exchange documents (``FrameworkDocument``, or the equivalent
plain dict coming out of a parser or a JSON file) into
``ArgumentationFramework`` instances, and back.

The bridge is where collaborator input is validated:
1. Document shape and argument-name uniqueness → pydantic validation
2. Attack endpoints → ``InvalidReferenceError`` while building, so a
   framework with dangling references never exists
"""

from __future__ import annotations

import logging
from typing import Union

from pydantic import ValidationError

from argsem.models import ExtensionRecord, FrameworkDocument

from .errors import InvalidReferenceError
from .models import ArgumentationFramework, Extension

logger = logging.getLogger("argsem.argumentation.bridge")


class FrameworkBridge:
    """
    Builds argumentation frameworks from documents and serialises
    frameworks and extensions for external writers.
    """

    def build_framework(
        self,
        document: Union[FrameworkDocument, dict],
    ) -> ArgumentationFramework:
        """
        Build an AF from a document.

        Args:
            document: a FrameworkDocument or a dict with "arguments"
                (names) and "attacks" (records or [attacker, target] pairs)

        Returns:
            ArgumentationFramework ready for extension computation
        """
        if not isinstance(document, FrameworkDocument):
            document = FrameworkDocument.model_validate(document)

        af = ArgumentationFramework()
        for name in document.arguments:
            af.add_argument(name)

        for record in document.attacks:
            try:
                af.add_attack(record.attackers, record.target)
            except InvalidReferenceError:
                logger.warning(
                    f"Rejected attack {record.attackers} -> {record.target}: "
                    f"unknown argument"
                )
                raise

        logger.debug(
            f"Built framework: {len(af)} arguments, {len(af.attacks())} attacks"
        )
        return af

    def build_from_json(self, text: str) -> ArgumentationFramework:
        try:
            document = FrameworkDocument.model_validate_json(text)
        except ValidationError as e:
            logger.warning(f"Invalid framework document: {e.error_count()} errors")
            raise
        return self.build_framework(document)

    def to_document(self, af: ArgumentationFramework) -> FrameworkDocument:
        data = af.to_dict()
        return FrameworkDocument(
            arguments=data["arguments"],
            attacks=[
                {"attackers": a["attackers"], "target": a["target"]}
                for a in data["attacks"]
            ],
        )

    def extension_record(self, af: ArgumentationFramework,
                         extension: Extension) -> ExtensionRecord:
        """Members listed in the framework's canonical order."""
        members = sorted(extension.arguments, key=af.index)
        return ExtensionRecord(
            semantics=extension.semantics.value if extension.semantics else "",
            arguments=[a.name for a in members],
        )
