"""Markdown section builders for the research writer."""

from datetime import datetime, timezone

SUMMARY_LIMIT = 500

DEFAULT_LIT_REVIEW = (
	"The existing literature provides important context for this research. Previous studies "
	"have explored related questions and established theoretical frameworks that inform our "
	"approach. This study builds upon established research while contributing new insights to the field."
)
DEFAULT_METHODOLOGY = (
	"This study employed a quantitative research approach with statistical analysis of the "
	"collected data. The methodology was designed to test the stated hypotheses through "
	"appropriate analytical techniques."
)
DEFAULT_DATA_DESCRIPTION = (
	"The dataset used in this analysis was processed and cleaned according to research best "
	"practices. Data quality checks were performed to ensure reliability of the results."
)


def _numbered(items: list[str]) -> str:
	return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))


def truncate(text: str, limit: int = SUMMARY_LIMIT) -> str:
	if len(text) <= limit:
		return text
	return text[:limit] + "..."


def executive_summary(question: str, hypotheses: list[str], results: str) -> str:
	return f"""## Executive Summary

This research study investigated: "{question}"

**Key Hypotheses Tested:**
{_numbered(hypotheses)}

**Main Findings:**
{truncate(results)}

The study provides valuable insights into the research question and offers evidence-based conclusions for further consideration."""


def literature_review(notes: str | None) -> str:
	return f"""## Literature Review

{notes or DEFAULT_LIT_REVIEW}

### Theoretical Framework
The research is grounded in established theoretical perspectives that guide the interpretation of findings and their implications for practice and future research."""


def methodology_section(methodology: str | None, data_description: str | None) -> str:
	return f"""## Methodology

{methodology or DEFAULT_METHODOLOGY}

### Data Description
{data_description or DEFAULT_DATA_DESCRIPTION}

### Analytical Approach
Statistical analyses were conducted to test each hypothesis, including descriptive statistics, correlation analysis, and appropriate inferential tests based on the data characteristics and research questions."""


def results_section(results: str, hypotheses: list[str]) -> str:
	summaries = "\n".join(
		f"**Hypothesis {i}:** {h}\n"
		"- Analysis conducted using appropriate statistical methods\n"
		"- Results interpreted in context of research question\n"
		for i, h in enumerate(hypotheses, 1)
	)
	return f"""## Results and Findings

### Statistical Analysis Results
{results}

### Hypothesis Testing Summary
{summaries}
### Key Insights
The analysis reveals important patterns and relationships in the data that contribute to our understanding of the research question."""


def discussion_section(question: str) -> str:
	return f"""## Discussion and Conclusions

### Interpretation of Findings
The results of this study provide important insights into the research question: "{question}"

### Limitations
Results should be read with the following limitations in mind:
- Sample characteristics and generalizability
- Methodological constraints
- Data collection limitations

### Future Research Directions
- Replication with different populations
- Longitudinal studies to examine changes over time
- Exploration of additional variables and relationships

### Conclusion
This research contributes evidence to the field and provides a foundation for continued investigation of these questions."""


def references_section() -> str:
	return """## References

*Full citations for the sources used in the literature review and methodology belong here, in the citation style of the target venue.*

1. [Literature sources]
2. [Methodology references]
3. [Statistical analysis references]"""


def build_report(
	project_id: str,
	question: str,
	hypotheses: list[str],
	results: str,
	lit_review_notes: str | None = None,
	methodology: str | None = None,
	data_description: str | None = None,
	generated_at: datetime | None = None,
) -> str:
	"""Assemble the full markdown report in section order."""
	stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
	sections = [
		f"# Research Report: {question}\n\n**Project ID:** {project_id}  \n**Generated:** {stamp}",
		executive_summary(question, hypotheses, results),
		literature_review(lit_review_notes),
		methodology_section(methodology, data_description),
		results_section(results, hypotheses),
		discussion_section(question),
		references_section(),
		"---\n*This report was generated by the Academic Research MCP Suite*",
	]
	return "\n\n".join(sections) + "\n"


def summarize(project_id: str, question: str, hypothesis_count: int) -> str:
	return (
		f"Research report completed for project {project_id}. The report addresses the research "
		f'question "{question}" and includes analysis of {hypothesis_count} hypotheses. '
		"The report covers literature review, methodology, results, and conclusions."
	)
