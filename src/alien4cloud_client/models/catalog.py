"""Catalog (CSAR archive) models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import A4CModel, A4CTime, Tag

# Keys of the mapping returned by the complex TOSCA type descriptor endpoint
TYPE_DESCRIPTION_CONTENT_TYPE_KEY = "_contentType"
TYPE_DESCRIPTION_TYPE_KEY = "_type"
TYPE_DESCRIPTION_PROPERTY_TYPE_KEY = "_propertyType"
TYPE_DESCRIPTION_TOSCA_DEFINITION_KEY = "_definition"
TYPE_DESCRIPTION_TOSCA_TYPE = "tosca"
TYPE_DESCRIPTION_COMPLEX_TYPE = "complex"
TYPE_DESCRIPTION_ARRAY_TYPE = "array"
TYPE_DESCRIPTION_MAP_TYPE = "map"


class Version(A4CModel):
    major_version: int = 0
    minor_version: int = 0
    incremental_version: int = 0
    build_number: int = 0
    qualifier: str | None = None


class CSARDependency(A4CModel):
    name: str = ""
    version: str = ""
    hash: str | None = None


class CSAR(A4CModel):
    """Cloud Service ARchive registered in the catalog."""

    id: str = ""
    name: str = ""
    version: str = ""
    hash: str | None = None
    definition_hash: str | None = None
    delegate_id: str | None = None
    delegate_type: str | None = None
    dependencies: list[CSARDependency] = Field(default_factory=list)
    description: str | None = None
    has_topology: bool = False
    import_date: A4CTime | None = None
    import_source: str | None = None
    license: str | None = None
    nested_version: Version | None = None
    node_types_count: int = 0
    tags: list[Tag] = Field(default_factory=list)
    template_author: str | None = None
    tosca_default_namespace: str | None = None
    tosca_definitions_version: str | None = None
    workspace: str | None = None
    yaml_file_path: str | None = None


class SimpleMark(A4CModel):
    line: int = 0
    column: int = 0


class ParsingError(A4CModel):
    """Problem reported while parsing one file of an uploaded archive."""

    error_level: str = ""
    error_code: str = ""
    problem: str = ""
    context: str = ""
    note: str = ""
    start_mark: SimpleMark = Field(default_factory=SimpleMark)
    end_mark: SimpleMark = Field(default_factory=SimpleMark)

    def __str__(self) -> str:
        text = f"{self.error_level}: {self.error_code} {self.problem}"
        if self.context:
            text += f". {self.context}"
        if self.note:
            text += f" ({self.note})"
        if self.start_mark.line or self.start_mark.column:
            text += f" StartMark[{self.start_mark.line}, {self.start_mark.column}]"
        if self.end_mark.line or self.end_mark.column:
            text += f" EndMark[{self.end_mark.line}, {self.end_mark.column}]"
        return text


class CSARUploadResult(A4CModel):
    csar: CSAR | None = None
    errors: dict[str, list[ParsingError]] = Field(default_factory=dict)


class PropertyDefinition(A4CModel):
    type: str
    entry_schema: dict[str, Any] | None = None
    required: bool | None = None
    description: str | None = None
    default: Any = None


class ComplexToscaTypeDescriptorRequest(A4CModel):
    property_definition: PropertyDefinition
    dependencies: list[CSARDependency] | None = None
