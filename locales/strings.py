#!/usr/bin/env python3
# EuroTune - One Euro filter calibration toolkit
# Copyright (C) 2024 EuroTune Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Localization strings for EuroTune.
Russian language dictionary for user interface.
"""

# Сообщения об ошибках
ERRORS = {
    'file_not_found': "Файл не найден: {file_path}",
    'table_not_found': "Таблица точности не найдена: {file_path}",
    'insufficient_noise_data': "Недостаточно данных покоя для оценки шума (минимум {min_points} отсчётов)",
    'insufficient_motion_data': "Недостаточно данных движения для оценки амплитуды (минимум {min_points} отсчётов)",
    'noise_not_converged': "Оценка шума не сошлась на {samples} отсчётах",
    'no_feasible_configuration': "Не найдены параметры фильтра после {rounds} ослаблений точности",
    'chart_failed': "Не удалось создать графики калибровки",
}

# Предупреждения (warnings) - критичные проблемы
WARNINGS = {
    'no_motion': "Не обнаружено значимого движения: амплитуда равна нулю, задержка фильтра не оценена",
    'lag_exceeded': "Задержка фильтра {lag:.3f} с превышает допустимую {max_lag:.3f} с",
    'precision_relaxed': "Целевая точность ослаблена {rounds} раз(а): {target:.4f} вместо {initial:.4f}",
    'sample_rate_mismatch': "Частота записи {rate:.1f} Гц отличается от ожидаемой {expected:.1f} Гц",
}

# Предостережения (cautions) - менее критичные замечания
CAUTIONS = {
    'precision_relaxed': "Целевая точность ослаблена до {target:.4f} (исходная {initial:.4f})",
    'noise_slow_convergence': "Оценка шума сошлась медленно: {samples} отсчётов",
    'high_noise': "Высокий уровень шума (СКО {std_dev:.4f}) выходит за пределы таблицы точности",
    'skipped_lines': "Пропущено {count} некорректных строк в записи",
}

# Подписи осей и заголовки графиков
LABELS = {
    # Заголовки
    'noise_convergence_title': "Сходимость оценки шума",
    'tuning_search_title': "Поиск параметров фильтра",

    # Оси
    'samples_axis': "Отсчёты",
    'variance_axis': "Дисперсия шума",
    'cutoff_axis': "Минимальная частота среза (Гц)",
    'beta_axis': "Beta",
    'lag_axis': "Задержка (с)",
    'precision_axis': "Точность",

    # Легенды
    'mean_variance': "Средняя дисперсия",
    'ci95_band': "95% доверительный интервал",
    'candidates': "Кандидаты",
    'accepted': "Принятые",
    'selected': "Выбрано: fc={cutoff:.2f} Гц, beta={beta:g}",
    'max_lag': "Допустимая задержка",
}
