"""ragpilot - Streamlit operator console.

Thin client for the RAG backend. All coordination logic lives in the
ragpilot coordinators; this file only handles:
  - Workspace creation and session-start loads (st.session_state)
  - Chat transcript rendering and query dispatch
  - Document manager: upload, add URL, rebuild, index status/search
  - Tool capability listing
"""

import asyncio

import streamlit as st

from ragpilot.main import bootstrap

st.set_page_config(
    page_title="ragpilot - RAG Assistant",
    layout="wide",
)


def init_session():
    """Create the workspace and run the initial loads on first visit."""
    if "workspace" not in st.session_state:
        workspace = bootstrap()
        asyncio.run(workspace.start())
        st.session_state.workspace = workspace


def show_state(state):
    """Render a coordinator's last message/error."""
    if state.last_error:
        st.error(state.last_error)
    elif state.last_message:
        st.success(state.last_message)


def render_chat(workspace):
    session = workspace.session

    for msg in session.transcript:
        with st.chat_message(msg.sender):
            if msg.is_error:
                st.error(msg.text)
            else:
                st.markdown(msg.text)

    session.use_tool_calling = st.toggle("Use tool calling", value=session.use_tool_calling)

    if user_input := st.chat_input("Ask a question about your documents...", disabled=session.is_loading):
        with st.spinner("Thinking..."):
            asyncio.run(session.send_query(user_input))
        st.rerun()


def render_documents(workspace):
    registry = workspace.registry
    ingestion = workspace.ingestion
    indexer = workspace.indexer
    busy = ingestion.state.is_loading or indexer.state.is_loading

    st.markdown("#### Configured sources")
    for source in registry.snapshot.configured_sources:
        st.markdown(f"- `{source}`")

    st.markdown("#### Uploaded files")
    if registry.snapshot.storage_location:
        st.caption(registry.snapshot.storage_location)
    for name in registry.snapshot.uploaded_files:
        st.markdown(f"- {name}")
    show_state(registry.state)
    if st.button("Refresh lists", disabled=busy):
        asyncio.run(registry.refresh())
        st.rerun()

    st.divider()
    # A new key resets the uploader widget after a successful upload
    nonce = st.session_state.get("upload_nonce", 0)
    uploaded = st.file_uploader("Upload a document", key=f"upload_{nonce}")
    if uploaded is not None:
        ingestion.select_file(uploaded.getvalue(), uploaded.name)
    else:
        ingestion.select_file(None, None)
    if st.button("Upload", disabled=busy):
        outcome = asyncio.run(ingestion.upload_file())
        if outcome.ok:
            st.session_state.upload_nonce = nonce + 1
        st.rerun()

    ingestion.url_input = st.text_input("Document URL", value=ingestion.url_input)
    ingestion.filename_input = st.text_input("Save as (optional)", value=ingestion.filename_input)
    if st.button("Add URL", disabled=busy):
        asyncio.run(ingestion.add_url())
        st.rerun()
    show_state(ingestion.state)

    st.divider()
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Rebuild index", disabled=busy, use_container_width=True):
            asyncio.run(indexer.rebuild_index())
    with col2:
        if st.button("Check index status", use_container_width=True):
            asyncio.run(indexer.index_status())
    show_state(indexer.state)
    if indexer.last_status is not None:
        if indexer.last_status.available:
            st.markdown(":green[**Index available**]")
        else:
            st.markdown(":red[**Index not available**]")
        if indexer.last_status.message:
            st.caption(indexer.last_status.message)

    with st.expander("Search the index directly"):
        query = st.text_input("Search query")
        max_results = st.number_input("Max results", min_value=1, max_value=50, value=5)
        if st.button("Search"):
            result = asyncio.run(indexer.search_index(query, int(max_results)))
            if result.error:
                st.error(result.error)
            for hit in result.hits:
                st.code(str(hit), language=None)


def render_tools(workspace):
    capabilities = workspace.capabilities
    if st.button("Reload tools", disabled=capabilities.state.is_loading):
        asyncio.run(capabilities.load_tools())
    show_state(capabilities.state)
    for tool in capabilities.tools:
        with st.container(border=True):
            st.markdown(f"**{tool.name}**")
            st.write(tool.description)
            if tool.schema_note:
                st.caption(tool.schema_note)
            if tool.schema_error:
                st.warning(tool.schema_error)


def main():
    """Run the Streamlit operator console."""
    init_session()
    workspace = st.session_state.workspace

    st.title("ragpilot")
    st.caption(f"Backend: {workspace.config.backend_url}")

    with st.sidebar:
        st.markdown("### Session")
        if st.button("[DEL] New Conversation", use_container_width=True,
                     disabled=workspace.session.is_loading):
            workspace.session.restart()
            st.rerun()

    chat_tab, docs_tab, tools_tab = st.tabs(["Chat", "Documents", "Tools"])
    with chat_tab:
        render_chat(workspace)
    with docs_tab:
        render_documents(workspace)
    with tools_tab:
        render_tools(workspace)


if __name__ == "__main__":
    main()
