"""Report card queries using SQLAlchemy Core."""

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..report_cards import ReportCard
from ..tables import report_cards


async def create_report_card(conn: AsyncConnection, report_card: ReportCard) -> None:
    await conn.execute(
        insert(report_cards).values(
            report_card_id=report_card.id,
            student_id=report_card.student_id,
            teacher_id=report_card.teacher_id,
            rating=report_card.rating,
            comments=report_card.comments,
            date=report_card.date,
        )
    )
