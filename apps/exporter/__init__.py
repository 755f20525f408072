"""
Exporter App - Labeling Task Sheet Export

Responsibilities:
- On-demand (RUN_ONCE) or cron-scheduled execution via APScheduler
- Login to the task API and reuse the bearer session for the whole run
- Paginated fetch of resolved and pending tasks per job
- Bounded-concurrency enrichment with item details and questionnaire answers
- Flatten tasks into one row per item and overwrite the destination sheet

Output:
- Google Sheets: one sheet per configured sheet name, header
  Job ID, Task ID, Submit Date, Name, Class, File Name, Answer
"""
