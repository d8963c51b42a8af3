"""Topology models and topology editor operations.

Editor operations are sent as-is to ``/editor/{topologyId}/execute``; the
``type`` field carries the fully qualified Java class name Alien4Cloud uses
to dispatch the operation.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from .common import A4CModel

_EDITOR_OPERATIONS = "org.alien4cloud.tosca.editor.operations"
_WORKFLOW_ACTIVITIES = "org.alien4cloud.tosca.model.workflow.activities"

UPDATE_NODE_PROPERTY_OPERATION = f"{_EDITOR_OPERATIONS}.nodetemplate.UpdateNodePropertyValueOperation"
UPDATE_CAPABILITY_PROPERTY_OPERATION = (
    f"{_EDITOR_OPERATIONS}.nodetemplate.UpdateCapabilityPropertyValueOperation"
)
ADD_NODE_OPERATION = f"{_EDITOR_OPERATIONS}.nodetemplate.AddNodeOperation"
ADD_RELATIONSHIP_OPERATION = f"{_EDITOR_OPERATIONS}.relationshiptemplate.AddRelationshipOperation"
CREATE_WORKFLOW_OPERATION = f"{_EDITOR_OPERATIONS}.workflow.CreateWorkflowOperation"
REMOVE_WORKFLOW_OPERATION = f"{_EDITOR_OPERATIONS}.workflow.RemoveWorkflowOperation"
ADD_ACTIVITY_OPERATION = f"{_EDITOR_OPERATIONS}.workflow.AddActivityOperation"
ADD_POLICY_OPERATION = f"{_EDITOR_OPERATIONS}.policies.AddPolicyOperation"
UPDATE_POLICY_TARGETS_OPERATION = f"{_EDITOR_OPERATIONS}.policies.UpdatePolicyTargetsOperation"
DELETE_POLICY_OPERATION = f"{_EDITOR_OPERATIONS}.policies.DeletePolicyOperation"

CALL_OPERATION_ACTIVITY = f"{_WORKFLOW_ACTIVITIES}.CallOperationWorkflowActivity"
INLINE_WORKFLOW_ACTIVITY = f"{_WORKFLOW_ACTIVITIES}.InlineWorkflowActivity"
SET_STATE_ACTIVITY = f"{_WORKFLOW_ACTIVITIES}.SetStateWorkflowActivity"


class NodeTemplate(A4CModel):
    name: str
    type: str


class ComponentRequirement(A4CModel):
    id: str
    type: str = ""
    relationship_type: str = ""


class ComponentCapability(A4CModel):
    id: str
    type: str = ""


class PropertyValueDefinition(A4CModel):
    type: str = ""
    required: bool = False


class ComponentProperty(A4CModel):
    key: str
    value: PropertyValueDefinition = Field(default_factory=PropertyValueDefinition)


class NodeType(A4CModel):
    archive_name: str = ""
    archive_version: str = ""
    element_id: str = ""
    requirements: list[ComponentRequirement] = Field(default_factory=list)
    capabilities: list[ComponentCapability] = Field(default_factory=list)
    properties: list[ComponentProperty] = Field(default_factory=list)


class RelationshipType(A4CModel):
    id: str = ""
    archive_name: str = ""
    archive_version: str = ""
    element_id: str = ""
    derived_from: list[str] = Field(default_factory=list)
    valid_targets: list[str] = Field(default_factory=list)


class CapabilityType(A4CModel):
    id: str = ""
    archive_name: str = ""
    archive_version: str = ""
    element_id: str = ""
    derived_from: list[str] = Field(default_factory=list)


class TopologyTemplate(A4CModel):
    archive_name: str = ""
    archive_version: str = ""
    node_templates: dict[str, NodeTemplate] = Field(default_factory=dict)


class Topology(A4CModel):
    """Topology content together with the types it references."""

    topology: TopologyTemplate = Field(default_factory=TopologyTemplate)
    node_types: dict[str, NodeType] = Field(default_factory=dict)
    relationship_types: dict[str, RelationshipType] = Field(default_factory=dict)
    capability_types: dict[str, CapabilityType] = Field(default_factory=dict)

    def node_type_of(self, node_name: str) -> NodeType | None:
        """Return the type definition of the node template named ``node_name``."""
        for template in self.topology.node_templates.values():
            if template.name != node_name:
                continue
            for node_type in self.node_types.values():
                if node_type.element_id == template.type:
                    return node_type
        return None


class BasicTopologyInfo(A4CModel):
    id: str
    archive_name: str = ""
    workspace: str = ""


class TopologySummary(A4CModel):
    id: str
    name: str = ""


class RuntimeTopologyContent(A4CModel):
    output_attributes: dict[str, list[str]] = Field(default_factory=dict)


class RuntimeTopology(A4CModel):
    topology: RuntimeTopologyContent = Field(default_factory=RuntimeTopologyContent)


class EditorOperation(A4CModel):
    """Base of every topology editor operation."""

    type: str
    previous_operation_id: str | None = None


class UpdateNodePropertyOperation(EditorOperation):
    type: str = UPDATE_NODE_PROPERTY_OPERATION
    node_name: str
    property_name: str
    property_value: Any


class UpdateCapabilityPropertyOperation(EditorOperation):
    type: str = UPDATE_CAPABILITY_PROPERTY_OPERATION
    node_name: str
    property_name: str
    property_value: Any
    capability_name: str


class AddNodeOperation(EditorOperation):
    type: str = ADD_NODE_OPERATION
    node_name: str
    node_type_id: str = Field(alias="indexedNodeTypeId")


class AddRelationshipOperation(EditorOperation):
    type: str = ADD_RELATIONSHIP_OPERATION
    node_name: str
    relationship_name: str
    relationship_type: str
    relationship_version: str
    requirement_name: str
    requirement_type: str
    target: str
    targeted_capability_name: str


class WorkflowOperation(EditorOperation):
    workflow_name: str


class WorkflowActivity(A4CModel):
    """Activity added to a workflow step.

    Use the ``operation_call``, ``inline_workflow`` and ``set_state`` factories,
    optionally chained with ``insert_before`` or ``append_after``.
    """

    type: str
    target: str | None = None
    target_relationship: str | None = None
    related_step_id: str | None = None
    before: bool | None = None
    inline: str | None = None
    interface_name: str | None = None
    operation_name: str | None = None
    state_name: str | None = None

    @classmethod
    def operation_call(
        cls,
        target: str,
        interface_name: str,
        operation_name: str,
        target_relationship: str | None = None,
    ) -> WorkflowActivity:
        return cls(
            type=CALL_OPERATION_ACTIVITY,
            target=target,
            target_relationship=target_relationship or None,
            interface_name=interface_name,
            operation_name=operation_name,
        )

    @classmethod
    def inline_workflow(cls, workflow_name: str) -> WorkflowActivity:
        return cls(type=INLINE_WORKFLOW_ACTIVITY, inline=workflow_name)

    @classmethod
    def set_state(cls, target: str, state_name: str) -> WorkflowActivity:
        return cls(type=SET_STATE_ACTIVITY, target=target, state_name=state_name)

    def insert_before(self, step_name: str) -> WorkflowActivity:
        self.related_step_id = step_name
        self.before = True
        return self

    def append_after(self, step_name: str) -> WorkflowActivity:
        self.related_step_id = step_name
        self.before = False
        return self


class ActivityDefinition(A4CModel):
    type: str
    inline: str | None = None
    interface_name: str | None = None
    operation_name: str | None = None
    state_name: str | None = None


class AddActivityOperation(EditorOperation):
    type: str = ADD_ACTIVITY_OPERATION
    workflow_name: str
    target: str | None = None
    target_relationship: str | None = None
    related_step_id: str | None = Field(default=None, alias="relatedStepID")
    before: bool | None = None
    activity: ActivityDefinition

    @classmethod
    def from_activity(cls, workflow_name: str, activity: WorkflowActivity) -> AddActivityOperation:
        if activity.type == SET_STATE_ACTIVITY:
            definition = ActivityDefinition(type=activity.type, state_name=activity.state_name)
        elif activity.type == INLINE_WORKFLOW_ACTIVITY:
            definition = ActivityDefinition(type=activity.type, inline=activity.inline)
        elif activity.type == CALL_OPERATION_ACTIVITY:
            definition = ActivityDefinition(
                type=activity.type,
                interface_name=activity.interface_name,
                operation_name=activity.operation_name,
            )
        else:
            raise ValueError(f"Unexpected activity type {activity.type}")

        return cls(
            workflow_name=workflow_name,
            target=activity.target,
            target_relationship=activity.target_relationship,
            related_step_id=activity.related_step_id,
            before=activity.before if activity.related_step_id else None,
            activity=definition,
        )


class PolicyOperation(EditorOperation):
    policy_name: str
    policy_type_id: str | None = None
    targets: list[str] | None = None


class EditorOperationRecord(A4CModel):
    id: str = ""


class EditorExecutionResult(A4CModel):
    """Editor state returned after an operation is applied."""

    last_operation_index: int = -1
    operations: list[EditorOperationRecord] = Field(default_factory=list)

    def last_operation_id(self) -> str | None:
        index = self.last_operation_index
        if 0 <= index < len(self.operations):
            return self.operations[index].id
        return None
