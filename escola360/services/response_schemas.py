# services/response_schemas.py
"""
Response schemas sent with each generation request (Gemini `responseSchema`
dialect: uppercase types, `required` lists, no $ref).

Property names match the document model aliases so responses validate
straight into escola360.models.planning_model.
"""

from escola360.models.planning_model import QuestionType, RecommendationType


def _string(description: str = None) -> dict:
    schema = {"type": "STRING"}
    if description:
        schema["description"] = description
    return schema


def _array(items: dict, description: str = None) -> dict:
    schema = {"type": "ARRAY", "items": items}
    if description:
        schema["description"] = description
    return schema


def _object(properties: dict, required: list = None) -> dict:
    schema = {"type": "OBJECT", "properties": properties}
    if required:
        schema["required"] = required
    return schema


LESSON_PLAN_SCHEMA = _object(
    {
        "topic": _string("O tema da unidade de ensino."),
        "objectives": _array(_string(), "Lista de objetivos de aprendizagem específicos para este tema."),
        "content_summary": _string("Resumo do conteúdo teórico."),
        "methodology": _string("Descrição detalhada da estratégia metodológica aplicada."),
        "bncc_skills": _array(
            _object(
                {
                    "code": _string("Código alfanumérico da BNCC (ex: EF01LP01)."),
                    "description": _string("Descrição completa da habilidade."),
                },
                ["code", "description"],
            )
        ),
        "activities": _array(
            _object({"title": _string(), "description": _string(), "duration": _string()},
                    ["title", "description", "duration"]),
            "3 atividades práticas alinhadas à metodologia escolhida.",
        ),
        "assessments": _array(
            _object(
                {
                    "title": _string(),
                    "methodology": _string("Como a avaliação será aplicada."),
                    "criteria": _string("Critérios de correção/análise."),
                },
                ["title", "methodology", "criteria"],
            ),
            "3 propostas diferenciadas de avaliação.",
        ),
        "inclusion": _object(
            {
                "general": _string("Estratégias gerais de DUA (Desenho Universal)."),
                "adhd": _string("Adaptação específica para TDAH neste tópico."),
                "autism": _string("Adaptação específica para TEA neste tópico."),
                "dyslexia": _string("Adaptação específica para Dislexia neste tópico."),
                "high_abilities": _string("Desafio extra para Altas Habilidades."),
            },
            ["general", "adhd", "autism", "dyslexia", "high_abilities"],
        ),
        "interdisciplinary": _array(
            _object(
                {
                    "subject": _string("Disciplina conectada (ex: Matemática, História)."),
                    "description": _string("Como conectar este tema com a outra disciplina."),
                },
                ["subject", "description"],
            )
        ),
    },
    [
        "topic", "objectives", "content_summary", "methodology", "bncc_skills",
        "activities", "assessments", "inclusion", "interdisciplinary",
    ],
)

BIMESTER_PLANNING_SCHEMA = _object(
    {
        "overview": _string("Visão geral dos objetivos pedagógicos para todo o bimestre."),
        "plans": _array(LESSON_PLAN_SCHEMA),
    },
    ["overview", "plans"],
)

RUBRIC_SCHEMA = _object(
    {
        "title": _string(),
        "criteria": _array(
            _object(
                {
                    "name": _string("Critério de avaliação (ex: Clareza, Argumentação)."),
                    "levels": _array(
                        _object(
                            {
                                "levelName": _string("Nome do nível (ex: Iniciante, Avançado)."),
                                "description": _string("Descrição do desempenho esperado neste nível."),
                            },
                            ["levelName", "description"],
                        )
                    ),
                },
                ["name", "levels"],
            )
        ),
    },
    ["title", "criteria"],
)

EDUCATIONAL_TEXT_SCHEMA = _object(
    {
        "title": _string(),
        "introduction": _string("Parágrafo introdutório que contextualiza o tema."),
        "sections": _array(
            _object(
                {
                    "subtitle": _string(),
                    "content": _string("Conteúdo detalhado da seção. Use markdown **negrito** para conceitos chave."),
                },
                ["subtitle", "content"],
            ),
            "Divida o texto em 3 a 5 seções lógicas com subtítulos claros.",
        ),
        "glossary": _array(
            _object({"term": _string(), "definition": _string()}, ["term", "definition"]),
            "Lista de 4 a 8 termos técnicos ou complexos citados no texto.",
        ),
        "recommendations": _array(
            _object(
                {
                    "type": {"type": "STRING", "enum": [t.value for t in RecommendationType]},
                    "title": _string(),
                    "authorOrSource": _string(),
                    "description": _string(),
                },
                ["type", "title"],
            ),
            "3 indicações de materiais complementares REAIS (Youtube, Livros, Sites).",
        ),
        "references": _array(
            _string(), "Bibliografia formatada (ABNT simplificada) das fontes teóricas utilizadas."
        ),
    },
    ["title", "introduction", "sections", "glossary", "recommendations", "references"],
)

QUESTION_BANK_SCHEMA = _array(
    _object(
        {
            "type": {"type": "STRING", "enum": [t.value for t in QuestionType]},
            "statement": _string("O enunciado da questão ou descrição da atividade."),
            "options": _array(_string(), "Para múltipla escolha, lista de alternativas."),
            "correctAnswer": _string("Para múltipla escolha, a alternativa correta."),
            "justification": _string("Justificativa detalhada do porquê a alternativa está correta."),
            "answerKey": _string("Gabarito comentado, diretrizes de resposta ou objetivos da atividade lúdica."),
            "bnccAlignment": _string("Habilidade BNCC trabalhada."),
        },
        ["type", "statement", "bnccAlignment"],
    )
)

SLIDE_DECK_SCHEMA = _object(
    {
        "title": _string(),
        "slides": _array(
            _object(
                {
                    "title": _string(),
                    "content": _string(
                        "Texto sintetizado, explicativo e didático sobre o tópico do slide (parágrafo). "
                        "Não use tópicos/bullets."
                    ),
                },
                ["title", "content"],
            )
        ),
    },
    ["title", "slides"],
)
