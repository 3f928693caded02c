"""
Analysis script templates for the code generator.

Each plan step is classified into an AnalysisKind by substring match and
rendered from a fixed template. The generated scripts target pandas/scipy
and are run later by the code executor, never imported here.
"""

import re
from enum import Enum
from string import Template


class AnalysisKind(str, Enum):
	"""Kinds of analysis a plan step can ask for."""
	EDA = "eda"
	CORRELATION = "correlation"
	REGRESSION = "regression"
	T_TEST = "ttest"
	ANOVA = "anova"
	CHI_SQUARE = "chisquare"
	CUSTOM = "custom"


# First match wins, so order matters
_CLASSIFIERS: list[tuple[AnalysisKind, tuple[str, ...]]] = [
	(AnalysisKind.EDA, ("descriptive", "eda", "exploratory")),
	(AnalysisKind.CORRELATION, ("correlation",)),
	(AnalysisKind.REGRESSION, ("regression", "linear model")),
	(AnalysisKind.T_TEST, ("t-test", "ttest")),
	(AnalysisKind.ANOVA, ("anova",)),
	(AnalysisKind.CHI_SQUARE, ("chi-square", "chi square")),
]

_FILE_PREFIX = {
	AnalysisKind.EDA: "01_eda",
	AnalysisKind.CORRELATION: "02_correlation",
	AnalysisKind.REGRESSION: "03_regression",
	AnalysisKind.T_TEST: "04_ttest",
	AnalysisKind.ANOVA: "05_anova",
	AnalysisKind.CHI_SQUARE: "06_chisquare",
}

_LABELS = {
	AnalysisKind.EDA: "comprehensive Python EDA script",
	AnalysisKind.CORRELATION: "correlation analysis script",
	AnalysisKind.REGRESSION: "regression analysis script",
	AnalysisKind.T_TEST: "t-test script",
	AnalysisKind.ANOVA: "ANOVA script",
	AnalysisKind.CHI_SQUARE: "chi-square test script",
}


def classify_step(step: str) -> AnalysisKind:
	"""Map a free-text plan step to an AnalysisKind."""
	lowered = step.lower()
	for kind, needles in _CLASSIFIERS:
		if any(needle in lowered for needle in needles):
			return kind
	return AnalysisKind.CUSTOM


def script_filename(kind: AnalysisKind, step: str, project_id: str) -> str:
	if kind is AnalysisKind.CUSTOM:
		slug = re.sub(r"[\s/\\]+", "_", step)
		return f"custom_{slug}_{project_id}.py"
	return f"{_FILE_PREFIX[kind]}_{project_id}.py"


def describe(kind: AnalysisKind, step: str) -> str:
	"""Log label for a generated script."""
	if kind is AnalysisKind.CUSTOM:
		return f"custom analysis script for: {step}"
	return _LABELS[kind]


_HEADER = Template('''#!/usr/bin/env python3
"""
$title
Project: $project_id
"""

import pandas as pd
import numpy as np
from scipy import stats

DATA_PATH = $data_path
HYPOTHESES = $hypotheses

print("=" * 60)
print("$banner")
print("=" * 60)

try:
    df = pd.read_csv(DATA_PATH)
except Exception as e:
    print(f"Error loading data: {e}")
    raise SystemExit(1)
print(f"Loaded {df.shape[0]} rows, {df.shape[1]} columns from {DATA_PATH}")

numeric_cols = df.select_dtypes(include=[np.number]).columns.tolist()
categorical_cols = df.select_dtypes(include=["object"]).columns.tolist()
''')

_BODIES = {
	AnalysisKind.EDA: '''
print("\\n--- Descriptive Statistics ---")
print(df.describe(include="all"))

print("\\n--- Missing Values ---")
print(df.isnull().sum())

for col in numeric_cols:
    q1, q3 = df[col].quantile(0.25), df[col].quantile(0.75)
    iqr = q3 - q1
    outliers = df[(df[col] < q1 - 1.5 * iqr) | (df[col] > q3 + 1.5 * iqr)]
    print(f"{col}: mean={df[col].mean():.2f} sd={df[col].std():.2f} outliers={len(outliers)}")

for col in categorical_cols:
    print(f"\\n{col}:")
    print(df[col].value_counts())

summary = df.describe(include="all")
summary.to_csv("eda_summary.csv")
print("\\nSaved eda_summary.csv")
''',
	AnalysisKind.CORRELATION: '''
if len(numeric_cols) < 2:
    print("Need at least two numeric columns for correlation analysis")
    raise SystemExit(0)

pearson = df[numeric_cols].corr(method="pearson")
spearman = df[numeric_cols].corr(method="spearman")
print("\\n--- Pearson ---")
print(pearson)
print("\\n--- Spearman ---")
print(spearman)

for i, a in enumerate(numeric_cols):
    for b in numeric_cols[i + 1:]:
        pair = df[[a, b]].dropna()
        if len(pair) > 2:
            r, p = stats.pearsonr(pair[a], pair[b])
            marker = " *" if p < 0.05 else ""
            print(f"{a} vs {b}: r={r:.3f}, p={p:.4f}{marker}")

pearson.to_csv("correlation_matrix.csv")
print("\\nSaved correlation_matrix.csv")
''',
	AnalysisKind.REGRESSION: '''
if len(numeric_cols) < 2:
    print("Need at least two numeric columns for regression")
    raise SystemExit(0)

target = numeric_cols[-1]
predictors = [c for c in numeric_cols if c != target and c.lower() != "id"] or numeric_cols[:-1]
frame = df[predictors + [target]].dropna()
X = np.column_stack([np.ones(len(frame))] + [frame[c].to_numpy() for c in predictors])
y = frame[target].to_numpy()
coef, residuals, _, _ = np.linalg.lstsq(X, y, rcond=None)
fitted = X @ coef
ss_res = float(((y - fitted) ** 2).sum())
ss_tot = float(((y - y.mean()) ** 2).sum())
r2 = 1 - ss_res / ss_tot if ss_tot else float("nan")

print(f"\\nOLS: {target} ~ {' + '.join(predictors)}")
print(f"  intercept: {coef[0]:.4f}")
for name, value in zip(predictors, coef[1:]):
    print(f"  {name}: {value:.4f}")
print(f"  R^2: {r2:.4f}")
''',
	AnalysisKind.T_TEST: '''
groups = [c for c in categorical_cols if df[c].nunique() == 2]
if not groups or not numeric_cols:
    print("Need a two-level grouping column and a numeric column for a t-test")
    raise SystemExit(0)

group = groups[0]
levels = sorted(df[group].dropna().unique())
for col in numeric_cols:
    a = df.loc[df[group] == levels[0], col].dropna()
    b = df.loc[df[group] == levels[1], col].dropna()
    if len(a) > 1 and len(b) > 1:
        t_stat, p_value = stats.ttest_ind(a, b)
        print(f"{col} by {group} ({levels[0]} vs {levels[1]}): t={t_stat:.3f}, p={p_value:.4f}")
''',
	AnalysisKind.ANOVA: '''
groups = [c for c in categorical_cols if 2 <= df[c].nunique() <= 10]
if not groups or not numeric_cols:
    print("Need a grouping column and a numeric column for ANOVA")
    raise SystemExit(0)

group = groups[0]
for col in numeric_cols:
    samples = [s[col].dropna() for _, s in df.groupby(group)]
    samples = [s for s in samples if len(s) > 1]
    if len(samples) >= 2:
        f_stat, p_value = stats.f_oneway(*samples)
        print(f"{col} by {group}: F={f_stat:.3f}, p={p_value:.4f}")
''',
	AnalysisKind.CHI_SQUARE: '''
if len(categorical_cols) < 2:
    print("Need at least two categorical columns for a chi-square test")
    raise SystemExit(0)

for i, a in enumerate(categorical_cols):
    for b in categorical_cols[i + 1:]:
        table = pd.crosstab(df[a], df[b])
        chi2, p, dof, _ = stats.chi2_contingency(table)
        print(f"{a} x {b}: chi2={chi2:.3f}, dof={dof}, p={p:.4f}")
''',
}

_CUSTOM_BODY = Template('''
STEP = $step
print(f"Custom analysis requested: {STEP}")
print("Hypotheses under test:")
for h in HYPOTHESES:
    print(f"  - {h}")
print(df.head())
print(f"Script for '{STEP}' needs to be implemented.")
''')

_TITLES = {
	AnalysisKind.EDA: ("Exploratory Data Analysis Script", "EXPLORATORY DATA ANALYSIS"),
	AnalysisKind.CORRELATION: ("Correlation Analysis Script", "CORRELATION ANALYSIS"),
	AnalysisKind.REGRESSION: ("Regression Analysis Script", "REGRESSION ANALYSIS"),
	AnalysisKind.T_TEST: ("Independent Samples T-Test Script", "T-TEST ANALYSIS"),
	AnalysisKind.ANOVA: ("One-Way ANOVA Script", "ANOVA"),
	AnalysisKind.CHI_SQUARE: ("Chi-Square Test of Independence Script", "CHI-SQUARE TEST"),
}


def render_script(kind: AnalysisKind, step: str, data_path: str, hypotheses: list[str], project_id: str) -> str:
	"""Render the script for one plan step."""
	if kind is AnalysisKind.CUSTOM:
		title = "Custom Analysis Script: " + step.replace('"', "'").replace("\\", "/")
		banner = "CUSTOM ANALYSIS"
		body = _CUSTOM_BODY.substitute(step=repr(step))
	else:
		title, banner = _TITLES[kind]
		body = _BODIES[kind]

	header = _HEADER.substitute(
		title=title,
		project_id=project_id,
		data_path=repr(data_path),
		hypotheses=repr(list(hypotheses)),
		banner=banner,
	)
	return header + body
