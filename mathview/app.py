"""
MathView — Streamlit app

File: mathview/app.py (this file)

Description:
Plot any formula in x and explore it:
- Type a formula such as  sin(x) + 0.5*x,  x^2 - 3x,  ln(x),  pow(x, 3)
- Optionally let a language model rewrite informal input (needs XAI_API_KEY
  or OPENAI_API_KEY in the environment; without a key the formula is used as typed)
- Overlay the symbolic derivative f'(x)
- Definite integral over [a, b] by composite Simpson's rule, with a SciPy
  adaptive quadrature value for comparison
- Download plot as PNG

Requirements (declared in pyproject.toml):
streamlit
numpy
matplotlib
scipy
sympy
openai

Run:
    pip install -e .
    streamlit run mathview/app.py

Troubleshooting:
- Points where f(x) is undefined (e.g. 1/x at 0, sqrt(x) for x < 0) are left
  as gaps in the curve.
- An integral fails when f is not finite at a or b; move the bounds.
"""

import streamlit as st

from mathview import config
from mathview.evaluator import Evaluator
from mathview.integrator import compute_integral
from mathview.normalizer import build_normalizer, passthrough
from mathview.plotting import figure_to_png, render_figure
from mathview.sampler import build_plot

config.configure_logging()

st.set_page_config(page_title="MathView — Formula Plotter", page_icon="📈", layout="wide")

evaluator = Evaluator()
llm_settings = config.load_llm_settings()


@st.cache_data(show_spinner="Normalizing formula...")
def normalize(raw_formula):
    return build_normalizer(llm_settings)(raw_formula)


st.title("📈 MathView — Plot from Formula")

col1, col2 = st.columns([1, 2])

with col1:
    st.header("Formula")
    raw_formula = st.text_input("f(x) =", value=config.DEFAULT_FORMULA,
                                placeholder="e.g. sin(x) + 0.5*x or pow(x,2) + 3*x")
    use_ai = False
    if llm_settings is not None:
        use_ai = st.checkbox(f"Normalize with AI ({llm_settings.model})", value=True)

    xmin = st.number_input("xmin", value=config.X_MIN, step=1.0)
    xmax = st.number_input("xmax", value=config.X_MAX, step=1.0)
    samples = st.number_input("Samples", min_value=config.MIN_SAMPLES, max_value=config.MAX_SAMPLES,
                              value=config.DEFAULT_SAMPLES, step=50)
    show_derivative = st.checkbox("Show derivative f'(x)")

    st.markdown("---")
    st.header("Definite integral")
    c_a, c_b = st.columns(2)
    int_a = c_a.number_input("from (a)", value=config.DEFAULT_INT_A)
    int_b = c_b.number_input("to (b)", value=config.DEFAULT_INT_B)
    do_integrate = st.button("Compute integral")

normalized = normalize(raw_formula) if use_ai else passthrough(raw_formula)
if normalized.note and use_ai:
    col1.caption(normalized.note)
elif normalized.used_ai and normalized.expression != raw_formula:
    col1.caption(f"Interpreted as: `{normalized.expression}`")

plot = build_plot(
    evaluator,
    normalized.expression,
    fallback=raw_formula,
    xmin=xmin,
    xmax=xmax,
    count=samples,
    with_derivative=show_derivative,
)

with col2:
    if not plot.ok:
        st.error(f"Could not read the formula: {plot.error}")
    else:
        if show_derivative:
            if plot.derivative_text:
                st.caption(f"Symbolic derivative: f'(x) = {plot.derivative_text}")
            else:
                st.caption("No derivative available for this formula.")

        if do_integrate:
            st.session_state.integral = compute_integral(evaluator, plot.formula, int_a, int_b)

        interval = None
        result = st.session_state.get("integral")
        if result is not None and result.matches(plot.formula, int_a, int_b):
            if not result.ok:
                st.error(f"Integration failed: {result.error}")
            else:
                interval = (int_a, int_b)
                m1, m2 = st.columns(2)
                m1.metric(f"∫ from {int_a:g} to {int_b:g} f(x) dx (Simpson)",
                          f"{round(result.value, config.RESULT_DIGITS)}")
                m2.metric("SciPy quad", f"{round(result.reference, config.RESULT_DIGITS)}",
                          help=f"estimated error {result.abserr:.2e}")

        fig = render_figure(plot, interval=interval, title="Formula viewer")
        st.pyplot(fig)

        if plot.series.defined < len(plot.series):
            st.info(f"f(x) is undefined at {len(plot.series) - plot.series.defined} of {len(plot.series)} sample points.")

        st.download_button(label="Download plot (PNG)", data=figure_to_png(fig),
                           file_name="mathview.png", mime="image/png")
