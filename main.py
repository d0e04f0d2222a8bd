"""
TableLink - restaurant booking links with capacity-safe reservations.

Run with:  streamlit run main.py
"""

from tablelink_app.ui_streamlit import main

if __name__ == "__main__":
    main()
