"""AgentLab — project showcase knowledge base with a RAG chat."""
