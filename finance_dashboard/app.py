"""Finance Dashboard GUI Application using NiceGUI."""

from typing import Optional

import plotly.graph_objects as go
from nicegui import app, ui

from finance_dashboard.config import settings
from finance_dashboard.database import init_db
from finance_dashboard.errors import StoreError, TransactionValidationError
from finance_dashboard.models import (
    ALL,
    CATEGORIES,
    DashboardView,
    FilterState,
    TimeWindow,
    TransactionType,
    categories_for,
    describe,
)
from finance_dashboard.models.filters import TIME_WINDOW_LABELS
from finance_dashboard.services import DashboardPipeline, TransactionService
from finance_dashboard.services.formatting import (
    format_currency,
    format_date,
    format_signed,
)
from finance_dashboard.services.seed import seed_demo_transactions

CHART_LAYOUT = dict(
    margin=dict(t=0, b=0, l=0, r=0),
    paper_bgcolor='rgba(0,0,0,0)',
    plot_bgcolor='rgba(0,0,0,0)',
    font=dict(color='#1f2937'),
)


class App:
    """Main application frontend using NiceGUI."""

    def __init__(self, transaction_service: Optional[TransactionService] = None):
        """Initialize the application."""
        init_db()

        # Initialize services
        self.transaction_service = transaction_service or TransactionService()
        if settings.seed_demo_data:
            seed_demo_transactions(self.transaction_service)

        self.pipeline = DashboardPipeline(on_view=self.render)
        self.pipeline.transaction_service = self.transaction_service

        # UI State
        self.selected_rows = []
        self.view: Optional[DashboardView] = None

        # Build UI
        self._setup_styles()
        self._build_ui()

        app.on_shutdown(self.pipeline.stop)
        try:
            self.pipeline.start()
        except StoreError as ex:
            ui.notify(f"Could not load transactions: {ex}", type='negative')

    def _setup_styles(self):
        """Setup custom styles and colors."""
        ui.colors(primary='#d62f86', secondary='#10b981', accent='#ef4444')
        ui.query('body').style('background-color: #f9fafb; color: #1f2937;')

    def _build_ui(self):
        """Construct the layout."""
        with ui.header().classes('items-center justify-between bg-white border-b border-gray-100'):
            with ui.column().classes('gap-0'):
                ui.label(settings.app_title).classes('text-2xl font-bold text-gray-900')
                ui.label('Overview of your finances').classes('text-sm text-gray-500')
            with ui.row().classes('items-center gap-2'):
                ui.button('Add Transaction', on_click=self._open_add_dialog, icon='edit_square')
                ui.button('Clear All', on_click=self._confirm_clear, icon='delete_sweep').props('flat color=red')

        with ui.column().classes('w-full max-w-6xl mx-auto p-4 gap-6'):
            self._build_filters()
            self._build_cards()
            with ui.row().classes('w-full gap-4 no-wrap'):
                self._build_charts()
                self._build_transactions()

    def _build_filters(self):
        """Build the filter controls."""
        with ui.row().classes('w-full items-end gap-4'):
            self.window_select = ui.select(
                {w.value: label for w, label in TIME_WINDOW_LABELS.items()},
                label='Period',
                value=TimeWindow.ALL.value,
                on_change=lambda e: self._set_filter(window=e.value),
            ).classes('w-40')
            self.category_select = ui.select(
                {ALL: 'All categories', **{c.value: f'{d.emoji} {d.label}' for c, d in CATEGORIES.items()}},
                label='Category',
                value=ALL,
                on_change=lambda e: self._set_filter(category=e.value),
            ).classes('w-48')
            self.type_select = ui.select(
                {ALL: 'All types', TransactionType.INCOME.value: 'Income', TransactionType.EXPENSE.value: 'Expense'},
                label='Type',
                value=ALL,
                on_change=lambda e: self._set_filter(type=e.value),
            ).classes('w-36')
            self.search_input = ui.input(
                'Search',
                on_change=lambda e: self._set_filter(query=e.value or ''),
            ).props('clearable').classes('grow')
            ui.button('Reset', on_click=self._reset_filters, icon='filter_alt_off').props('flat')

    def _build_cards(self):
        with ui.row().classes('w-full gap-4'):
            self.balance_card = self._stat_card('Total Balance', format_currency(0), 'pink-600')
            self.income_card = self._stat_card('Income', format_currency(0), 'green-600')
            self.expense_card = self._stat_card('Expenses', format_currency(0), 'red-500')

    def _stat_card(self, title: str, value: str, color: str):
        with ui.card().classes('grow p-6 bg-white border border-gray-100 items-center justify-center') as card:
            ui.label(title).classes(f'text-{color} uppercase text-xs font-bold tracking-wider')
            card.value_label = ui.label(value).classes('text-3xl font-bold text-gray-900')
        return card

    def _build_charts(self):
        """Build the analytics charts."""
        with ui.column().classes('w-1/3 gap-4'):
            with ui.card().classes('w-full p-4 bg-white border border-gray-100'):
                ui.label('Dashboard').classes('text-lg font-bold mb-2')
                self.split_chart = ui.plotly(go.Figure()).classes('w-full h-64')
            with ui.card().classes('w-full p-4 bg-white border border-gray-100'):
                ui.label('Expenses by Category').classes('text-lg font-bold mb-2')
                self.category_chart = ui.plotly(go.Figure()).classes('w-full h-64')
                self.category_legend = ui.column().classes('w-full gap-1')
            with ui.card().classes('w-full p-4 bg-white border border-gray-100'):
                ui.label('Monthly Overview').classes('text-lg font-bold mb-2')
                self.monthly_chart = ui.plotly(go.Figure()).classes('w-full h-64')

    def _build_transactions(self):
        """Build the transactions table section."""
        with ui.card().classes('grow p-4 bg-white border border-gray-100'):
            with ui.row().classes('w-full items-center justify-between mb-4'):
                ui.label('Recent Transactions').classes('text-lg font-bold')
                with ui.row().classes('items-center gap-2'):
                    self.count_label = ui.label('0 transactions').classes('text-sm text-gray-400')
                    ui.button('Delete Selected', on_click=self._delete_selected, color='red').bind_visibility_from(
                        self, 'selected_rows', backward=lambda x: len(x) > 0
                    )

            columns = [
                {'name': 'date', 'label': 'Date', 'field': 'date', 'align': 'left'},
                {'name': 'description', 'label': 'Description', 'field': 'description', 'align': 'left'},
                {'name': 'category', 'label': 'Category', 'field': 'category', 'align': 'left'},
                {'name': 'amount', 'label': 'Amount', 'field': 'amount', 'align': 'right'},
            ]

            self.table = ui.table(columns=columns, rows=[], row_key='id', selection='multiple', pagination=20).classes('w-full')
            self.table.on('selection', lambda e: setattr(self, 'selected_rows', self.table.selected))

    # Rendering

    def render(self, view: DashboardView):
        """Update every widget from a freshly computed view."""
        self.view = view
        summary = view.summary

        self.balance_card.value_label.set_text(format_currency(summary.balance))
        self.income_card.value_label.set_text(format_currency(summary.income))
        self.expense_card.value_label.set_text(format_currency(summary.expense))

        self._render_split(view)
        self._render_categories(view)
        self._render_months(view)
        self._render_table(view)

    def _render_split(self, view: DashboardView):
        fig = go.Figure(data=[go.Pie(
            labels=[s.name for s in view.split],
            values=[s.value for s in view.split],
            marker=dict(colors=[s.color for s in view.split]),
            hole=.6,
            sort=False,
        )])
        fig.update_layout(
            **CHART_LAYOUT,
            showlegend=True,
            annotations=[dict(text=f"Balance<br><b>{format_currency(view.summary.balance)}</b>", showarrow=False)],
        )
        self.split_chart.update_figure(fig)

    def _render_categories(self, view: DashboardView):
        fig = go.Figure(data=[go.Pie(
            labels=[s.label for s in view.categories],
            values=[s.total for s in view.categories],
            marker=dict(colors=[s.color for s in view.categories]),
            hole=.4,
        )])
        fig.update_layout(**CHART_LAYOUT, showlegend=False)
        self.category_chart.update_figure(fig)

        self.category_legend.clear()
        with self.category_legend:
            if not view.categories:
                ui.label('No expenses in this period').classes('text-sm text-gray-400')
            for s in view.categories:
                with ui.row().classes('w-full justify-between text-sm'):
                    ui.label(f'{s.emoji} {s.label}')
                    ui.label(f'{format_currency(s.total)} ({s.percentage:.0f}%)').classes('text-gray-500')

    def _render_months(self, view: DashboardView):
        labels = [m.label for m in view.months]
        fig = go.Figure(data=[
            go.Bar(name='Income', x=labels, y=[m.income for m in view.months], marker_color=view.split[0].color),
            go.Bar(name='Expense', x=labels, y=[m.expense for m in view.months], marker_color=view.split[1].color),
        ])
        fig.update_layout(**CHART_LAYOUT, barmode='group', showlegend=True)
        self.monthly_chart.update_figure(fig)

    def _render_table(self, view: DashboardView):
        rows = []
        for t in view.transactions:
            descriptor = describe(t.category)
            rows.append({
                'id': t.id,
                'date': format_date(t.date),
                'description': t.description,
                'category': f'{descriptor.emoji} {descriptor.label}',
                'amount': format_signed(t),
            })
        self.table.rows = rows
        self.table.selected = [r for r in self.table.selected if r['id'] in {row['id'] for row in rows}]
        self.selected_rows = list(self.table.selected)
        self.table.update()
        self.count_label.set_text(f'{len(rows)} transactions')

    # Filters

    def _set_filter(self, **changes):
        self.pipeline.update_filters(**changes)

    def _reset_filters(self):
        self.window_select.value = TimeWindow.ALL.value
        self.category_select.value = ALL
        self.type_select.value = ALL
        self.search_input.value = ''
        self.pipeline.apply_filters(FilterState())

    # Store actions

    def _open_add_dialog(self):
        """Open the add-transaction dialog."""
        def category_options(kind: str) -> dict:
            return {c.value: f'{describe(c).emoji} {describe(c).label}' for c in categories_for(TransactionType(kind))}

        def on_type_change(e):
            options = category_options(e.value)
            category.set_options(options, value=next(iter(options)))

        with ui.dialog() as dialog, ui.card().classes('w-96'):
            ui.label('Add Transaction').classes('text-xl font-bold mb-4')
            kind = ui.toggle(
                {TransactionType.EXPENSE.value: 'Expense', TransactionType.INCOME.value: 'Income'},
                value=TransactionType.EXPENSE.value,
                on_change=on_type_change,
            )
            amount = ui.input('Amount').props('inputmode=decimal').classes('w-full')
            description = ui.input('Description').classes('w-full')
            initial = category_options(TransactionType.EXPENSE.value)
            category = ui.select(initial, label='Category', value=next(iter(initial))).classes('w-full')

            with ui.row().classes('w-full justify-end mt-4'):
                ui.button('Cancel', on_click=dialog.close).props('flat')
                ui.button('Save', on_click=lambda: self._save_new(
                    dialog, kind.value, amount.value, description.value, category.value
                ))
        dialog.open()

    def _save_new(self, dialog, kind, amount, description, category):
        try:
            payload = self.transaction_service.build_transaction(kind, amount, description, category)
        except TransactionValidationError as ex:
            ui.notify(str(ex), type='warning')
            return

        try:
            self.transaction_service.insert(payload)
        except StoreError as ex:
            ui.notify(f'Could not save transaction: {ex}', type='negative')
            return
        dialog.close()
        ui.notify('Transaction added', type='positive')

    async def _delete_selected(self):
        """Delete all selected rows."""
        count = len(self.selected_rows)
        with ui.dialog() as dialog, ui.card():
            ui.label(f'Are you sure you want to delete {count} transactions?').classes('text-lg')
            with ui.row().classes('w-full justify-end'):
                ui.button('Cancel', on_click=dialog.close).props('flat')
                ui.button('Delete', color='red', on_click=lambda: self._perform_delete(dialog))
        dialog.open()

    def _perform_delete(self, dialog):
        ids = [row['id'] for row in self.selected_rows]
        dialog.close()
        try:
            if len(ids) == 1:
                self.transaction_service.delete_by_id(ids[0])
            else:
                self.transaction_service.bulk_delete(ids)
        except StoreError as ex:
            ui.notify(f'Could not delete: {ex}', type='negative')
            return
        ui.notify(f'Deleted {len(ids)} transactions')

    def _confirm_clear(self):
        with ui.dialog() as dialog, ui.card():
            ui.label('Delete every transaction? This cannot be undone.').classes('text-lg')
            with ui.row().classes('w-full justify-end'):
                ui.button('Cancel', on_click=dialog.close).props('flat')
                ui.button('Clear All', color='red', on_click=lambda: self._perform_clear(dialog))
        dialog.open()

    def _perform_clear(self, dialog):
        dialog.close()
        try:
            deleted = self.transaction_service.clear_all()
        except StoreError as ex:
            ui.notify(f'Could not clear transactions: {ex}', type='negative')
            return
        ui.notify(f'Deleted {deleted} transactions')

# The UI is built during initialization of the App class.
# NiceGUI elements are global, so we just need to instantiate the class.
