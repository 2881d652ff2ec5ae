"""
Catalog of predefined workflow templates.

The catalog is read-only. Templates are activated through the
WorkflowRegistry, which copies them into runnable instances.
"""

from typing import Dict, Iterable, List, Optional

from legal_workflows.domain import (
    Action,
    ActionType,
    Condition,
    ConditionOperator,
    NotFoundError,
    Trigger,
    TriggerType,
    WorkflowDefinition,
    validate_definition,
)


WORKFLOW_TEMPLATES = (
    WorkflowDefinition(
        id="novo-processo-atribuir",
        name="Novo Processo → Atribuir Advogado",
        description="Quando criar novo processo, atribuir automaticamente a um advogado",
        trigger=Trigger(type=TriggerType.PROCESS_CREATED),
        actions=(
            Action(ActionType.ASSIGN_OWNER.value, {"metodo": "round_robin"}),
            Action(
                ActionType.SEND_NOTIFICATION.value,
                {"destinatario": "advogado_atribuido", "mensagem": "Novo processo atribuído a você"},
            ),
        ),
    ),
    WorkflowDefinition(
        id="prazo-7dias-alerta",
        name="Prazo em 7 dias → Alerta",
        description="Criar alerta quando prazo estiver próximo (7 dias)",
        trigger=Trigger(
            type=TriggerType.DEADLINE_APPROACHING,
            conditions=(Condition("dias_restantes", ConditionOperator.LTE, 7),),
        ),
        actions=(
            Action(
                ActionType.CREATE_ALERT.value,
                {"tipo": "prazo_urgente", "mensagem": "Prazo em {dias_restantes} dias"},
            ),
            Action(
                ActionType.SEND_EMAIL.value,
                {
                    "destinatario": "advogado_responsavel",
                    "assunto": "Prazo urgente: {numero_processo}",
                    "template": "prazo_urgente",
                },
            ),
        ),
    ),
    WorkflowDefinition(
        id="status-arquivado-notificar",
        name="Status → Arquivado",
        description="Quando processo for arquivado, notificar cliente e equipe",
        trigger=Trigger(
            type=TriggerType.STATUS_CHANGED,
            conditions=(Condition("status_novo", ConditionOperator.EQ, "arquivado"),),
        ),
        actions=(
            Action(
                ActionType.SEND_NOTIFICATION.value,
                {"destinatario": "equipe", "mensagem": "Processo {numero} foi arquivado"},
            ),
            Action(
                ActionType.ADD_COMMENT.value,
                {"texto": "Processo arquivado automaticamente pelo sistema"},
            ),
        ),
    ),
    WorkflowDefinition(
        id="audiencia-lembrete",
        name="Audiência → Lembrete 1 dia antes",
        description="Enviar lembrete 1 dia antes de cada audiência",
        trigger=Trigger(
            type=TriggerType.HEARING_APPROACHING,
            conditions=(Condition("horas_restantes", ConditionOperator.LTE, 24),),
        ),
        actions=(
            Action(
                ActionType.SEND_NOTIFICATION.value,
                {"destinatario": "advogado_responsavel", "mensagem": "Lembrete: Audiência amanhã às {hora}"},
            ),
            Action(
                ActionType.SEND_EMAIL.value,
                {
                    "destinatario": "advogado_responsavel",
                    "assunto": "Lembrete: Audiência amanhã",
                    "template": "lembrete_audiencia",
                },
            ),
        ),
    ),
    WorkflowDefinition(
        id="processo-urgente-escalacao",
        name="Processo Urgente → Escalar para Sócio",
        description="Processos urgentes são automaticamente notificados ao sócio",
        trigger=Trigger(
            type=TriggerType.PROCESS_CREATED,
            conditions=(Condition("prazo_dias", ConditionOperator.LTE, 3),),
        ),
        actions=(
            Action(
                ActionType.SEND_NOTIFICATION.value,
                {"destinatario": "socios", "mensagem": "Processo urgente criado: {numero}"},
            ),
            Action(ActionType.ADD_TAG.value, {"tag": "URGENTE"}),
        ),
    ),
)


# ============================================
# AUTHORING METADATA
# ============================================

TRIGGER_TYPES: Dict[TriggerType, dict] = {
    TriggerType.PROCESS_CREATED: {
        "name": "Processo Criado",
        "description": "Quando um novo processo é cadastrado",
        "fields": ["status", "tribunal", "classe", "prazo_dias"],
    },
    TriggerType.STATUS_CHANGED: {
        "name": "Status Alterado",
        "description": "Quando o status de um processo muda",
        "fields": ["status_anterior", "status_novo"],
    },
    TriggerType.DEADLINE_APPROACHING: {
        "name": "Prazo Próximo",
        "description": "Quando um prazo está próximo de vencer",
        "fields": ["dias_restantes", "tipo_prazo"],
    },
    TriggerType.HEARING_APPROACHING: {
        "name": "Audiência Próxima",
        "description": "Quando uma audiência está próxima",
        "fields": ["horas_restantes", "dias_restantes"],
    },
    TriggerType.COMMENT_ADDED: {
        "name": "Comentário Adicionado",
        "description": "Quando alguém comenta em um processo",
        "fields": ["usuario", "mencoes"],
    },
}

ACTION_TYPES: Dict[ActionType, dict] = {
    ActionType.ASSIGN_OWNER: {
        "name": "Atribuir a Advogado",
        "description": "Atribui o processo a um advogado",
        "parameters": ["metodo", "usuario_id"],
    },
    ActionType.SEND_NOTIFICATION: {
        "name": "Enviar Notificação",
        "description": "Envia notificação push",
        "parameters": ["destinatario", "mensagem"],
    },
    ActionType.SEND_EMAIL: {
        "name": "Enviar Email",
        "description": "Envia email personalizado",
        "parameters": ["destinatario", "assunto", "template"],
    },
    ActionType.CREATE_ALERT: {
        "name": "Criar Alerta",
        "description": "Cria um novo alerta no sistema",
        "parameters": ["tipo", "mensagem"],
    },
    ActionType.ADD_TAG: {
        "name": "Adicionar Tag",
        "description": "Adiciona uma tag ao processo",
        "parameters": ["tag"],
    },
    ActionType.ADD_COMMENT: {
        "name": "Criar Comentário",
        "description": "Adiciona um comentário automático",
        "parameters": ["texto"],
    },
    ActionType.CHANGE_STATUS: {
        "name": "Alterar Status",
        "description": "Muda o status do processo",
        "parameters": ["status"],
    },
}

OPERATORS: Dict[ConditionOperator, str] = {
    ConditionOperator.EQ: "Igual a",
    ConditionOperator.NE: "Diferente de",
    ConditionOperator.GT: "Maior que",
    ConditionOperator.GTE: "Maior ou igual a",
    ConditionOperator.LT: "Menor que",
    ConditionOperator.LTE: "Menor ou igual a",
    ConditionOperator.CONTAINS: "Contém",
    ConditionOperator.NOT_CONTAINS: "Não contém",
}


class TemplateCatalog:
    """
    Read-only set of workflow templates available for activation.

    Templates are validated when the catalog is built.
    """

    def __init__(self, templates: Optional[Iterable[WorkflowDefinition]] = None):
        self._templates: Dict[str, WorkflowDefinition] = {}
        for template in WORKFLOW_TEMPLATES if templates is None else templates:
            validate_definition(template)
            if template.id in self._templates:
                raise ValueError(f"Duplicate template id: {template.id}")
            self._templates[template.id] = template

    def list_templates(self) -> List[WorkflowDefinition]:
        """List all templates in catalog order."""
        return list(self._templates.values())

    def get_template(self, template_id: str) -> WorkflowDefinition:
        """Get a template by id."""
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError(f"Template '{template_id}' not found")
        return template

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    @staticmethod
    def metadata() -> dict:
        """Trigger, action and operator descriptions for authoring surfaces."""
        return {
            "trigger_types": {t.value: info for t, info in TRIGGER_TYPES.items()},
            "action_types": {a.value: info for a, info in ACTION_TYPES.items()},
            "operators": {o.value: label for o, label in OPERATORS.items()},
        }
