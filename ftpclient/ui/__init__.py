"""
Interactive console for ftpclient: command dispatch and the Streamlit page.
"""
