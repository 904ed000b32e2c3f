# services/prompts.py
"""Prompt builders for each generation action. Prompts are written in Brazilian Portuguese."""

from typing import Dict, List

from escola360.models.planning_model import (
    AssessmentConfig,
    CurriculumStandard,
    LessonPlanUnit,
    QuestionType,
    is_high_school,
)

STATE_CURRICULA: Dict[str, str] = {
    "Acre": "Currículo de Referência Único do Acre",
    "Alagoas": "Referencial Curricular de Alagoas (ReCAL)",
    "Amapá": "Referencial Curricular Amapaense",
    "Amazonas": "Referencial Curricular Amazonense",
    "Bahia": "Documento Curricular Referencial da Bahia (DCRC)",
    "Ceará": "Documento Curricular Referencial do Ceará (DCRC)",
    "Distrito Federal": "Currículo em Movimento",
    "Espírito Santo": "Currículo do Espírito Santo",
    "Goiás": "Documento Curricular de Goiás (DC-GO)",
    "Maranhão": "Documento Curricular do Território Maranhense",
    "Mato Grosso": "Documento de Referência Curricular de Mato Grosso (DRC-MT)",
    "Mato Grosso do Sul": "Referencial Curricular de MS",
    "Minas Gerais": "Currículo Referência de Minas Gerais (CRMG)",
    "Pará": "Documento Curricular do Estado do Pará",
    "Paraíba": "Proposta Curricular do Estado da Paraíba",
    "Paraná": "Referencial Curricular do Paraná (CREP)",
    "Pernambuco": "Currículo de Pernambuco",
    "Piauí": "Currículo do Piauí",
    "Rio de Janeiro": "Documento Curricular do Rio de Janeiro",
    "Rio Grande do Norte": "Documento Curricular do RN",
    "Rio Grande do Sul": "Referencial Curricular Gaúcho (RCG)",
    "Rondônia": "Referencial Curricular de Rondônia",
    "Roraima": "Documento Curricular de Roraima (DCRR)",
    "Santa Catarina": "Currículo Base do Território Catarinense",
    "São Paulo": "Currículo Paulista",
    "Sergipe": "Currículo de Sergipe",
    "Tocantins": "Documento Curricular do Tocantins (DCT)",
}


def extract_state_name(curriculum: str) -> str:
    if "BNCC" in curriculum:
        return "Nacional"
    return curriculum.split(" (")[0]


def curriculum_instruction(curriculum: str) -> str:
    """Alignment block: plain BNCC, or state document + BNCC with the 80/20 universal/regional rule."""
    if curriculum == CurriculumStandard.BNCC.value:
        return (
            "ALINHAMENTO: Base Nacional Comum Curricular (BNCC). "
            "Siga estritamente as competências e habilidades previstas nacionalmente."
        )

    state_name = extract_state_name(curriculum)
    doc_name = STATE_CURRICULA.get(state_name, curriculum)
    return f"""
ALINHAMENTO: {doc_name} + BNCC.
CONTEXTO REGIONAL: Estado de {state_name}.

REGRA DE OURO (UNIVERSALIDADE vs REGIONALISMO):
1. ATENUE O CONTEXTO REGIONAL. Use a proporção de 80% UNIVERSAL/CIENTÍFICO (BNCC) para 20% REGIONAL.
2. A "Territorialidade" ({state_name}) deve ser usada apenas como contextualização sutil, NUNCA como foco principal excessivo.
3. PROIBIDO forçar regionalismo em ciências exatas (Física, Química, Matemática) ou temas gramaticais universais.
4. Use referências locais apenas se forem exemplos naturais e pertinentes. Se não houver exemplo local óbvio, use exemplos universais clássicos.
5. O objetivo é evitar a repetição excessiva do nome do estado em cada atividade ou frase. Mantenha o equilíbrio.
"""


def multiple_choice_option_count(grade: str) -> int:
    return 5 if is_high_school(grade) else 4


def build_bimester_prompt(grade: str, subject: str, bimester: str, curriculum: str, custom_context: str = "") -> str:
    extra = (
        f'Considerar as seguintes observações específicas: "{custom_context}"'
        if custom_context
        else "Nenhum contexto extra."
    )
    return f"""
Você é um especialista sênior em educação brasileira, BNCC, DUA (Desenho Universal para Aprendizagem) e metodologias ativas.

TAREFA:
Desenvolva um PLANEJAMENTO BIMESTRAL COMPLETO.
Série: {grade}
Componente Curricular: {subject}
Período: {bimester}

DIRETRIZES CURRICULARES:
{curriculum_instruction(curriculum)}

CONTEXTO EXTRA FORNECIDO PELO USUÁRIO:
{extra}

INSTRUÇÕES:
1. Identifique TODOS os principais eixos temáticos ou unidades previstos para este bimestre.
2. Para CADA tema, gere um plano de aula completo contendo:
   - Objetivos, Habilidades BNCC, Resumo.
   - Metodologia: Utilize uma abordagem DIVERSIFICADA E EFICAZ (padrão).
   - 3 Atividades Práticas.
   - 3 Avaliações.
   - **INCLUSÃO (DUA)**: Gere adaptações específicas para TDAH, TEA, Dislexia e Altas Habilidades.
   - **INTERDISCIPLINARIDADE (STEAM)**: Sugira 2 a 3 conexões com outras disciplinas.

A resposta deve ser rica e detalhada.
"""


def build_regeneration_prompt(unit: LessonPlanUnit, grade: str, subject: str, strategy: str, curriculum: str) -> str:
    objectives = ", ".join(f'"{o}"' for o in unit.objectives)
    return f"""
REFORMULE este plano de aula para uma nova Metodologia Ativa.

Plano Original:
Tema: {unit.topic}
Objetivos Atuais: [{objectives}]

NOVA ESTRATÉGIA METODOLÓGICA ALVO: {strategy}

Instruções:
1. Mantenha o mesmo TEMA e OBJETIVOS de aprendizagem.
2. REESCREVA completamente as seguintes seções para se adequarem à metodologia {strategy}:
   - Methodology (Descrição de como aplicar {strategy} neste tema).
   - Activities (Crie 3 atividades novas baseadas em {strategy}).
   - Assessments (Avaliações compatíveis com {strategy}).
   - Inclusion (Adapte as estratégias de inclusão para o contexto de {strategy}).

Contexto: {grade}, {subject}.
{curriculum_instruction(curriculum)}
"""


def build_rubric_prompt(grade: str, subject: str, topic: str, methodology: str) -> str:
    return f"""
Crie uma RUBRICA DE AVALIAÇÃO (Matriz de Referência) detalhada para o tema.

Série: {grade}
Disciplina: {subject}
Tema: {topic}
Contexto da Aula: {methodology}

Estrutura:
- 4 a 5 Critérios de Avaliação nas linhas (ex: Domínio do Conteúdo, Colaboração, Criatividade).
- 4 Níveis de Desempenho nas colunas (ex: Insuficiente, Em Desenvolvimento, Proficiente, Avançado).

Para cada célula da matriz, descreva o comportamento observável esperado.
"""


def build_educational_text_prompt(grade: str, subject: str, topic: str) -> str:
    return f"""
Atue como um EDITOR DE LIVROS DIDÁTICOS premium.

TAREFA:
Escreva um CAPÍTULO DE LIVRO DIDÁTICO completo e aprofundado sobre o tema, formatado para impressão.

DADOS:
Série: {grade}
Disciplina: {subject}
Tema: {topic}

DIAGRAMAÇÃO E ESTRUTURA (IMPORTANTE):
1. **Formato Editorial**: O texto não deve ser um bloco único. Divida-o em SUBTÍTULOS lógicos (Seções) para facilitar a leitura.
2. **Negrito Pedagógico**: Use marcação markdown (**exemplo**) para destacar TODOS os conceitos-chave, termos técnicos e definições importantes no corpo do texto.
3. **Rigor Acadêmico**: Cite pensadores, cientistas e obras reais (com datas) no corpo do texto.
4. **Glossário**: Extraia os termos mais difíceis ou técnicos e crie um glossário ao final.
5. **Saiba Mais**: Indique 3 materiais complementares REAIS (Vídeos do Youtube, Livros clássicos ou Artigos confiáveis) que o aluno possa buscar.
6. **Bibliografia**: Liste as referências teóricas usadas para criar o texto.

Estilo de Escrita:
- Linguagem adequada à série ({grade}), mas com vocabulário enriquecedor.
- Explicativo, fluido e envolvente.
- Universal (evite regionalismos a menos que o tema exija).
"""


def build_question_bank_prompt(grade: str, subject: str, topic: str, quantities: Dict[QuestionType, int]) -> str:
    options = multiple_choice_option_count(grade)
    letters = "A, B, C, D, E" if options == 5 else "A, B, C, D"
    requests: List[str] = [
        f'- {qty} questões do tipo "{QuestionType(qtype).value}"' for qtype, qty in quantities.items() if qty > 0
    ]
    requested = "\n".join(requests)
    return f"""
Crie um Banco de Questões / Atividades Escolares altamente qualificado.
Série: {grade}
Disciplina: {subject}
Tema: {topic}

QUANTIDADES SOLICITADAS:
{requested}

REGRAS DE ESTRUTURA E CONTEÚDO:
1. Para questões de 'Múltipla Escolha': Gere OBRIGATORIAMENTE {options} alternativas ({letters}).
2. **Justificativa Obrigatória**: Para questões de Múltipla Escolha, forneça no campo 'justification' uma explicação detalhada.
3. Para Dissertativas e Pesquisa: Forneça um 'answerKey' robusto.
4. Para Atividade Lúdica: Crie um jogo, dinâmica ou atividade recreativa adequada à idade.
5. Indique explicitamente a Habilidade BNCC trabalhada.
6. **Balanceamento Regional**: NÃO force citações regionais em excesso. Mantenha o foco no conteúdo universal e científico da disciplina. Use o contexto local apenas se for natural.
"""


def build_slide_deck_prompt(topic: str, grade: str, subject: str) -> str:
    specific = ""
    lowered = subject.lower()
    if "inglês" in lowered or "english" in lowered:
        specific = """
ATENÇÃO PARA AULA DE INGLÊS:
1. Exemplos e Vocabulário em INGLÊS.
2. Explicações em PORTUGUÊS.
"""
    return f"""
Crie uma APRESENTAÇÃO DE SLIDES didática e profissional sobre: "{topic}".
Público: {grade}, disciplina {subject}.
{specific}
Mantenha o foco no conteúdo universal.

ESTRUTURA DOS SLIDES:
- 6 a 8 slides.
- **Conteúdo ULTRA-SINTETIZADO**: Reduza a quantidade de texto em 40%. Seja direto, impactante e resumido.
- Limite: Máximo de 30 a 40 palavras por slide no campo 'content'.
- O objetivo é deixar espaço visual livre nos slides para que o professor possa inserir imagens posteriormente.
- O campo 'content' deve conter 1 ou 2 parágrafos curtos e poderosos.
- NÃO use listas de tópicos (bullets).
- NÃO inclua notas para o professor.
"""


def build_assessment_prompt(grade: str, subject: str, topic: str, bimester: str, config: AssessmentConfig) -> str:
    mc_instruction = "5 alternativas (A-E)" if is_high_school(grade) else "4 alternativas (A-D)"
    return f"""
Crie uma AVALIAÇÃO FORMAL (PROVA) escolar.

Dados:
Série: {grade}
Disciplina: {subject}
Tema: {topic}
Bimestre: {bimester}

Estrutura Solicitada:
- {config.mc_count} Questões de Múltipla Escolha ({mc_instruction}).
- {config.essay_count} Questões Dissertativas.

Instruções:
1. Linguagem formal e adequada.
2. Evite enunciados vagos.
3. Indique a Habilidade BNCC.
4. **Balanceamento Regional**: Priorize questões universais sobre o tema. Use contexto regional APENAS se for extremamente pertinente ao assunto (ex: Geografia local). Evite repetições excessivas de nomes de estados ou cidades.

Retorne a lista de questões estruturada.
"""
