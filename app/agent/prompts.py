"""
Prompt templates for the completion service, keyed by template id.

Variables are filled with str.format, so literal braces are doubled.
"""

CLASSIFY_INTENT = "classify_intent"
EXTRACT_CHART_PARAMS = "extract_chart_params"
RAG_ANSWER = "rag_answer"
DIRECT_REPLY = "direct_reply"
COMBINE_RESULTS = "combine_results"

PROMPT_TEMPLATES: dict[str, str] = {
    CLASSIFY_INTENT: """
        You are a delegating agent that analyzes user queries and decides which tools to use.

        Based on the user query, determine the appropriate action:
        - If the query asks for charts, graphs, or data visualization -> "chart"
        - If the query asks for information, facts, or knowledge -> "rag"
        - If the query requires both charting and information -> "both"
        - If the query is a simple greeting or doesn't need tools -> "direct"

        User Query: {query}

        Respond with only one of: chart, rag, both, direct
        """,
    EXTRACT_CHART_PARAMS: """
        Analyze the user query and extract chart parameters.

        User Query: {query}

        Extract the following information:
        1. chartType: line, bar, pie, doughnut, or radar
        2. title: A descriptive title for the chart
        3. data: Description of what data should be visualized

        Respond with JSON only, no explanation:
        {{"chartType": "line", "title": "Chart Title", "data": "Data description"}}
        """,
    RAG_ANSWER: """
        You are a helpful assistant. Answer the user's question based on the following information
        retrieved from a knowledge base.

        Retrieved Information:
        {context}

        User Question: {question}

        Provide a comprehensive answer based on the retrieved information. If the information doesn't
        fully answer the question, say so. Always mention the source file IDs when available.

        Answer:
        """,
    DIRECT_REPLY: """
        You are a helpful assistant. Provide a direct response to the user's query.

        User Query: {query}

        Provide a helpful and informative response.
        """,
    COMBINE_RESULTS: """
        You have both chart data and information from a knowledge base. Create a comprehensive
        response that combines both.

        User Query: {query}
        Chart Information: {chart_info}
        Knowledge Base Information: {rag_info}

        Create a response that:
        1. Answers the user's question using the knowledge base information
        2. Mentions the chart that was created
        3. Integrates both pieces of information naturally

        Keep the response concise and helpful.
        """,
}


def render_prompt(template_id: str, variables: dict) -> str:
    """Fill a template. Raises ValueError for an unknown id, KeyError for a missing variable."""
    template = PROMPT_TEMPLATES.get(template_id)
    if template is None:
        raise ValueError(f"Unknown prompt template: {template_id!r}")
    return template.format(**variables)
